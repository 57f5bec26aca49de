import os, json, pdb, tempfile, shutil
import unittest as test

from nistoar.pid import config
from nistoar.pid.exceptions import ConfigurationException

class TestLoadFromFile(test.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.mkdtemp(prefix="_test_config.")

    def tearDown(self):
        shutil.rmtree(self.tmpdir, ignore_errors=True)

    def write(self, name, content):
        path = os.path.join(self.tmpdir, name)
        with open(path, 'w') as fd:
            fd.write(content)
        return path

    def test_yaml(self):
        cfgfile = self.write("pid.yml", """
site_url: https://data.example.org
settings:
  ":Protocol": doi
  ":DoiProvider": FAKE
providers:
  fake:
    authority: "10.5072"
    shoulder: FK2/
""")
        cfg = config.load_from_file(cfgfile)
        self.assertEqual(cfg['site_url'], "https://data.example.org")
        self.assertEqual(cfg['settings'][':Protocol'], "doi")
        self.assertEqual(cfg['providers']['fake']['authority'], "10.5072")

    def test_json(self):
        cfgfile = self.write("pid.json", json.dumps({"site_url": "https://data.example.org",
                                                     "providers": {"perma": {"authority": "NIST"}}}))
        cfg = config.load_from_file(cfgfile)
        self.assertEqual(cfg['providers']['perma']['authority'], "NIST")

    def test_empty(self):
        cfgfile = self.write("empty.yml", "")
        self.assertEqual(config.load_from_file(cfgfile), {})

    def test_bad_content(self):
        cfgfile = self.write("bad.json", "{ goober")
        with self.assertRaises(ConfigurationException):
            config.load_from_file(cfgfile)

        cfgfile = self.write("bad.yml", "foo: [bar\n")
        with self.assertRaises(ConfigurationException):
            config.load_from_file(cfgfile)

        cfgfile = self.write("list.yml", "- foo\n- bar\n")
        with self.assertRaises(ConfigurationException):
            config.load_from_file(cfgfile)

    def test_missing(self):
        with self.assertRaises(IOError):
            config.load_from_file(os.path.join(self.tmpdir, "goober.yml"))

class TestMergeConfig(test.TestCase):

    def test_merge(self):
        defs = { "a": 1, "b": { "c": 2, "d": 3 }, "e": [1, 2] }
        prim = { "b": { "d": 4, "f": 5 }, "e": [3], "g": "h" }
        out = config.merge_config(prim, defs)
        self.assertEqual(out, { "a": 1, "b": { "c": 2, "d": 4, "f": 5 }, "e": [3], "g": "h" })

        # inputs are untouched
        self.assertEqual(defs, { "a": 1, "b": { "c": 2, "d": 3 }, "e": [1, 2] })
        self.assertEqual(prim, { "b": { "d": 4, "f": 5 }, "e": [3], "g": "h" })

    def test_replace_nondict(self):
        out = config.merge_config({ "b": "x" }, { "b": { "c": 2 } })
        self.assertEqual(out, { "b": "x" })

class TestConfigSettings(test.TestCase):

    def test_lookup(self):
        settings = config.ConfigSettings({ ":Protocol": "doi", "DoiProvider": "FAKE",
                                           ":Shoulder": None, ":Limit": 5 })
        self.assertEqual(settings.get_value_for_key(config.Key.Protocol), "doi")
        self.assertEqual(settings.get_value_for_key("Protocol"), "doi")
        self.assertEqual(settings.get_value_for_key(config.Key.DoiProvider), "FAKE")
        self.assertEqual(settings.get_value_for_key(":Limit"), "5")
        self.assertIsNone(settings.get_value_for_key(config.Key.Shoulder))
        self.assertEqual(settings.get_value_for_key(config.Key.Shoulder, "FK2/"), "FK2/")
        self.assertIsNone(settings.get_value_for_key(config.Key.Authority))
        self.assertEqual(settings.get_value_for_key(config.Key.Authority, ""), "")

    def test_empty(self):
        settings = config.ConfigSettings()
        self.assertIsNone(settings.get_value_for_key(config.Key.Protocol))
        self.assertTrue(isinstance(settings, config.SettingsLookup))

    def test_bad_settings(self):
        with self.assertRaises(ConfigurationException):
            config.ConfigSettings(["Protocol"])


if __name__ == '__main__':
    test.main()
