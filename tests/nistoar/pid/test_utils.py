import os, pdb, tempfile, shutil, threading, time, logging
import unittest as test

from nistoar.pid import utils
from nistoar.pid.exceptions import StateException

class TestBlab(test.TestCase):

    def test_blab(self):
        log = logging.getLogger("PID.test")
        log.setLevel(utils.BLAB)
        try:
            with self.assertLogs("PID.test", utils.BLAB) as cm:
                utils.blab(log, "Parsing: %s", "doi:10.5072/FK2/BYM3IW")
            self.assertIn("Parsing: doi:10.5072/FK2/BYM3IW", cm.output[0])
        finally:
            log.setLevel(logging.NOTSET)

class TestLockedFile(test.TestCase):

    class OtherThread(threading.Thread):
        def __init__(self, func, pause=0.05):
            threading.Thread.__init__(self)
            self.f = func
            self.pause = pause
        def run(self):
            if self.f:
                time.sleep(self.pause)
                self.f('o')

    def lockedop(self, who, mode='r', sleep=0.5):
        lf = utils.LockedFile(self.lfile, mode)
        self.assertIsNone(lf.fo)
        with lf as lockdfile:
            self.assertIsNotNone(lf.fo)
            self.rfd.write(who+'a')
            time.sleep(sleep)
            self.rfd.write(who+'r')
        self.assertIsNone(lf.fo)

    def setUp(self):
        self.tmpdir = tempfile.mkdtemp(prefix="_test_utils.")
        self.lfile = os.path.join(self.tmpdir, "issued-pids.tsv")
        self.rfile = os.path.join(self.tmpdir, "result.txt")
        with open(self.lfile, 'w') as fd:
            fd.write("doi:10.5072/FK2/1\t{}\n")
        self.rfd = None

    def tearDown(self):
        shutil.rmtree(self.tmpdir, ignore_errors=True)

    def run_pair(self, mine, theirs):
        t = self.OtherThread(lambda who: self.lockedop(who, theirs))
        with open(self.rfile, 'w') as self.rfd:
            t.start()
            self.lockedop('t', mine)
            t.join()
        with open(self.rfile) as self.rfd:
            return self.rfd.read()

    def test_shared_reads(self):
        self.assertEqual(self.run_pair('r', 'r'), "taoatror")

    def test_exclusive_append(self):
        self.assertEqual(self.run_pair('a', 'a'), "tatroaor")

    def test_read_waits_for_append(self):
        self.assertEqual(self.run_pair('a', 'r'), "tatroaor")

    def test_append_waits_for_read(self):
        self.assertEqual(self.run_pair('r', 'a+'), "tatroaor")

    def test_open_twice(self):
        lf = utils.LockedFile(self.lfile)
        with lf as fd:
            self.assertEqual(fd.readline(), "doi:10.5072/FK2/1\t{}\n")
            with self.assertRaises(StateException):
                lf.open()
        self.assertIsNone(lf.fo)

        # a failed open releases the thread lock
        with self.assertRaises(IOError):
            utils.LockedFile(os.path.join(self.tmpdir, "goober", "x.tsv")).open()
        with utils.LockedFile(self.lfile, 'a') as fd:
            fd.write("doi:10.5072/FK2/2\t{}\n")
        with open(self.lfile) as fd:
            self.assertEqual(len(fd.readlines()), 2)


if __name__ == '__main__':
    test.main()
