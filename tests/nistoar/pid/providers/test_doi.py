import os, pdb
import unittest as test

from nistoar.pid.providers import doi
from nistoar.pid.providers.base import PidProvider
from nistoar.pid.globalid import GlobalId
from nistoar.pid.dvobject import Dataset, DataFile
from nistoar.pid.service import IssuedPIDRegistry
from nistoar.pid.sim import SimRegistryClient
from nistoar.pid.exceptions import ConfigurationException

siteurl = "https://data.example.org"

class TestFakeDOIProvider(test.TestCase):

    def setUp(self):
        self.pidsvc = IssuedPIDRegistry()
        self.prov = doi.FakeDOIProvider("10.5072", "FK2/", pidsvc=self.pidsvc,
                                        config={ "site_url": siteurl })

    def test_ctor(self):
        self.assertTrue(isinstance(self.prov, PidProvider))
        self.assertEqual(self.prov.protocol, "doi")
        self.assertEqual(self.prov.authority, "10.5072")
        self.assertEqual(self.prov.shoulder, "FK2/")
        self.assertEqual(self.prov.separator, "/")
        self.assertEqual(self.prov.url_prefix, "https://doi.org/")
        self.assertEqual(self.prov.provider_type, "FAKE")
        self.assertEqual(self.prov.name, "FAKE")
        self.assertEqual(self.prov.get_provider_information(), ["FAKE", "https://dataverse.org"])
        self.assertFalse(self.prov.register_when_published())

    def test_parse(self):
        gid = self.prov.parse_persistent_id("doi:10.5072/FK2/BYM3IW")
        self.assertEqual(gid.protocol, "doi")
        self.assertEqual(gid.authority, "10.5072")
        self.assertEqual(gid.identifier, "FK2/BYM3IW")
        self.assertEqual(gid.provider_name, "FAKE")
        self.assertEqual(gid.as_url(), "https://doi.org/10.5072/FK2/BYM3IW")

        for url in ["https://doi.org/10.5072/FK2/BYM3IW", "http://doi.org/10.5072/FK2/BYM3IW",
                    "https://dx.doi.org/10.5072/FK2/BYM3IW", "http://dx.doi.org/10.5072/FK2/BYM3IW",
                    "doi%3A10.5072/FK2/BYM3IW"]:
            self.assertEqual(self.prov.parse_persistent_id(url), gid, url)

        # DOIs of other authorities are still parsed
        gid = self.prov.parse_persistent_id("doi:10.18434/mds2-1234")
        self.assertEqual(gid.authority, "10.18434")
        self.assertFalse(self.prov.can_manage_pid(gid))

    def test_parse_bad(self):
        self.assertIsNone(self.prov.parse_persistent_id("hdl:1902.1/111012"))
        self.assertIsNone(self.prov.parse_persistent_id("doi:11.5072/FK2/BYM3IW"))
        self.assertIsNone(self.prov.parse_persistent_id("doi:10.5072"))
        self.assertIsNone(self.prov.parse_persistent_id("doi:10.5072/"))
        self.assertIsNone(self.prov.parse_persistent_id("10.5072/FK2/BYM3IW"))
        self.assertIsNone(self.prov.parse_persistent_id("doi:10.5072/FK2 BYM3IW"))
        self.assertIsNone(self.prov.parse_persistent_id_parts("hdl", "10.5072", "FK2/BYM3IW"))

    def test_generate(self):
        ds = self.prov.generate_identifier(Dataset())
        self.assertEqual(ds.protocol, "doi")
        self.assertEqual(ds.authority, "10.5072")
        self.assertTrue(ds.identifier.startswith("FK2/"))
        self.assertEqual(len(ds.identifier), 10)
        self.assertTrue(self.prov.can_manage_pid(ds.global_id))
        self.assertEqual(ds.global_id.provider_name, "FAKE")
        self.assertEqual(self.prov.parse_persistent_id(ds.global_id.as_string()), ds.global_id)

    def test_lifecycle(self):
        ds = Dataset("doi", "10.5072", "FK2/BYM3IW", title="Fake Data")
        self.assertEqual(self.prov.create_identifier(ds), "doi:10.5072/FK2/BYM3IW")
        self.assertEqual(self.prov.get_identifier_metadata(ds), {})
        self.assertEqual(self.prov.modify_identifier_target_url(ds),
                         siteurl+"/dataset.xhtml?persistentId=doi:10.5072/FK2/BYM3IW")
        self.assertIsNone(self.prov.delete_identifier(ds))
        self.assertFalse(self.prov.already_registered(ds))

        ds = Dataset()
        self.assertTrue(self.prov.publicize_identifier(ds))
        self.assertTrue(ds.identifier.startswith("FK2/"))
        self.assertTrue(self.prov.already_registered(ds))

class TestRegistryDOIProviders(test.TestCase):

    def setUp(self):
        self.pidsvc = IssuedPIDRegistry()
        self.client = SimRegistryClient("https://api.test.datacite.org/")
        self.cfg = { "site_url": siteurl }

    def test_datacite(self):
        prov = doi.DataCiteDOIProvider("10.5072", "FK2/", client=self.client, pidsvc=self.pidsvc,
                                       config=self.cfg)
        self.assertEqual(prov.provider_type, "datacite")
        self.assertEqual(prov.name, "DataCite")
        self.assertEqual(prov.get_provider_information(), ["DataCite", "https://api.test.datacite.org/"])
        self.assertEqual(prov.separator, "/")
        self.assertEqual(prov.url_prefix, "https://doi.org/")
        self.assertTrue(prov.register_when_published())

        gid = prov.parse_persistent_id("https://doi.org/10.5072/FK2/BYM3IW")
        self.assertEqual(gid.provider_name, "DataCite")
        self.assertIsNone(prov.parse_persistent_id("doi:1902.1/FK2/BYM3IW"))

        ds = Dataset("doi", "10.5072", "FK2/BYM3IW")
        self.assertFalse(prov.already_registered(ds))
        self.assertEqual(prov.create_identifier(ds), "success: doi:10.5072/FK2/BYM3IW")
        self.assertTrue(prov.already_registered(ds))

    def test_ezid(self):
        cfg = dict(self.cfg)
        cfg['service_url'] = "https://ezid.cdlib.org/"
        prov = doi.EZIdDOIProvider("10.5072", "FK2/", client=self.client, config=cfg)
        self.assertEqual(prov.provider_type, "ezid")
        self.assertEqual(prov.name, "EZID")
        self.assertEqual(prov.get_provider_information(), ["EZID", "https://ezid.cdlib.org/"])

        gid = prov.parse_persistent_id("doi:10.5072/FK2/BYM3IW")
        self.assertEqual(gid.provider_name, "EZID")

    def test_no_client(self):
        with self.assertRaises(ConfigurationException):
            doi.DataCiteDOIProvider("10.5072", "FK2/", config=self.cfg)


if __name__ == '__main__':
    test.main()
