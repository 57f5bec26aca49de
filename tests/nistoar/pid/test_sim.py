import os, pdb
import unittest as test

from nistoar.pid import sim
from nistoar.pid.clients import RegistryClient
from nistoar.pid.exceptions import (PIDRegistryException, PIDRegistryServerError,
                                    PIDRegistryClientError, PIDNotFound)

class TestSimRegistryClient(test.TestCase):

    def setUp(self):
        self.cli = sim.SimRegistryClient("https://registry.example.com/")
        self.pid = "doi:10.5072/FK2/BYM3IW"

    def test_ctor(self):
        self.assertTrue(isinstance(self.cli, RegistryClient))
        self.assertEqual(self.cli.endpoint, "https://registry.example.com/")
        self.assertFalse(self.cli.failing)
        self.assertEqual(len(self.cli.records), 0)

    def test_lifecycle(self):
        self.assertFalse(self.cli.exists(self.pid))
        self.assertIn(self.pid, self.cli.reserve(self.pid, { "_target": "https://a.org/" }))
        self.assertTrue(self.cli.exists(self.pid))
        self.assertEqual(self.cli.get_metadata(self.pid),
                         { "_target": "https://a.org/", "_status": "reserved" })

        with self.assertRaises(PIDRegistryClientError) as cm:
            self.cli.reserve(self.pid, {})
        self.assertEqual(cm.exception.code, 409)

        self.cli.update(self.pid, { "_target": "https://b.org/" })
        self.assertEqual(self.cli.get_metadata(self.pid)["_target"], "https://b.org/")

        self.cli.publicize(self.pid, { "datacite.title": "Data" })
        md = self.cli.get_metadata(self.pid)
        self.assertEqual(md["_status"], "public")
        self.assertEqual(md["datacite.title"], "Data")

        self.cli.delete(self.pid)
        self.assertFalse(self.cli.exists(self.pid))
        self.assertEqual([c[0] for c in self.cli.calls],
                         ["exists", "reserve", "exists", "get_metadata", "reserve", "update",
                          "get_metadata", "publicize", "get_metadata", "delete", "exists"])

    def test_not_found(self):
        with self.assertRaises(PIDNotFound) as cm:
            self.cli.get_metadata(self.pid)
        self.assertEqual(cm.exception.code, 404)
        self.assertEqual(cm.exception.resource, self.pid)
        with self.assertRaises(PIDNotFound):
            self.cli.update(self.pid, {})
        with self.assertRaises(PIDNotFound):
            self.cli.delete(self.pid)

    def test_failing(self):
        self.cli.failing = True
        with self.assertRaises(PIDRegistryServerError) as cm:
            self.cli.exists(self.pid)
        self.assertEqual(cm.exception.code, 503)
        self.assertTrue(isinstance(cm.exception, PIDRegistryException))


if __name__ == '__main__':
    test.main()
