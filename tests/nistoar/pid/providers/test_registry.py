import os, pdb, logging
import unittest as test

from nistoar.pid.providers.doi import DataCiteDOIProvider
from nistoar.pid.dvobject import Dataset, DataFile
from nistoar.pid.service import IssuedPIDRegistry
from nistoar.pid.sim import SimRegistryClient
from nistoar.pid.exceptions import PIDRegistryException, PIDRegistryServerError, PIDNotFound

siteurl = "https://data.example.org"

class TestRegistryPidProvider(test.TestCase):

    def setUp(self):
        self.client = SimRegistryClient()
        self.pidsvc = IssuedPIDRegistry()
        self.prov = DataCiteDOIProvider("10.5072", "FK2/", client=self.client, pidsvc=self.pidsvc,
                                        config={ "site_url": siteurl })
        self.ds = Dataset("doi", "10.5072", "FK2/BYM3IW", title="Hot Chocolate Viscosity",
                          authors=["Doe, John", "Roe, Jane"], publisher="NIST",
                          publication_year="2024")

    def test_create_metadata(self):
        md = self.prov.get_metadata_for_create_indicator(self.ds)
        self.assertEqual(md["datacite.creator"], "Doe, John; Roe, Jane")
        self.assertEqual(md["datacite.title"], "Hot Chocolate Viscosity")
        self.assertEqual(md["datacite.publisher"], "NIST")
        self.assertEqual(md["datacite.publicationyear"], "2024")
        self.assertEqual(md["datacite.resourcetype"], "Dataset")
        self.assertEqual(md["_status"], "reserved")
        self.assertEqual(md["_target"], siteurl+"/dataset.xhtml?persistentId=doi:10.5072/FK2/BYM3IW")

        md = self.prov.get_metadata_for_create_indicator(Dataset("doi", "10.5072", "FK2/ABCDEF"))
        self.assertEqual(md["datacite.creator"], ":unav")
        self.assertEqual(md["datacite.title"], ":unav")
        self.assertEqual(md["datacite.publisher"], ":unav")
        self.assertEqual(md["datacite.publicationyear"], ":unav")

    def test_datafile_metadata(self):
        df = self.ds.add_file(DataFile("doi", "10.5072", "FK2/BYM3IW/XYZ"))
        md = self.prov.get_metadata_for_create_indicator(df)
        self.assertEqual(md["datacite.creator"], "Doe, John; Roe, Jane")
        self.assertEqual(md["datacite.title"], "Hot Chocolate Viscosity")
        self.assertEqual(md["_target"], siteurl+"/file.xhtml?persistentId=doi:10.5072/FK2/BYM3IW/XYZ")

        df.title = "viscosity.csv"
        md = self.prov.get_metadata_for_create_indicator(df)
        self.assertEqual(md["datacite.title"], "viscosity.csv")

        self.assertEqual(self.prov.get_metadata_for_target_url(df),
                         { "_target": siteurl+"/file.xhtml?persistentId=doi:10.5072/FK2/BYM3IW/XYZ" })

    def test_create_identifier(self):
        out = self.prov.create_identifier(self.ds)
        self.assertIn("doi:10.5072/FK2/BYM3IW", out)
        self.assertIn("doi:10.5072/FK2/BYM3IW", self.client.records)
        self.assertEqual(self.client.records["doi:10.5072/FK2/BYM3IW"]["_status"], "reserved")
        self.assertTrue(self.prov.already_registered(self.ds))
        self.assertTrue(self.prov.already_registered_pid(self.ds.global_id, False))

        # a second registration is rejected by the service
        with self.assertRaises(PIDRegistryException):
            self.prov.create_identifier(self.ds)

    def test_create_identifier_bad_reply(self):
        class BadReplyClient(SimRegistryClient):
            def reserve(self, pid, metadata):
                super(BadReplyClient, self).reserve(pid, metadata)
                return "error: bad request"

        self.prov.client = BadReplyClient()
        with self.assertRaises(PIDRegistryException) as cm:
            self.prov.create_identifier(self.ds)
        self.assertEqual(cm.exception.resource, "doi:10.5072/FK2/BYM3IW")
        self.assertIn("error: bad request", str(cm.exception))

        class EmptyReplyClient(SimRegistryClient):
            def reserve(self, pid, metadata):
                return ""

        self.prov.client = EmptyReplyClient()
        with self.assertRaises(PIDRegistryException):
            self.prov.create_identifier(self.ds)

    def test_identifier_metadata(self):
        self.assertEqual(self.prov.get_identifier_metadata(self.ds), {})
        self.prov.create_identifier(self.ds)
        md = self.prov.get_identifier_metadata(self.ds)
        self.assertEqual(md["datacite.title"], "Hot Chocolate Viscosity")

        self.client.failing = True
        with self.assertRaises(PIDRegistryServerError):
            self.prov.get_identifier_metadata(self.ds)

    def test_modify_target(self):
        with self.assertRaises(PIDNotFound):
            self.prov.modify_identifier_target_url(self.ds)

        self.prov.create_identifier(self.ds)
        self.prov.site_url = "https://newsite.example.org"
        url = self.prov.modify_identifier_target_url(self.ds)
        self.assertEqual(url, "https://newsite.example.org/dataset.xhtml?persistentId=doi:10.5072/FK2/BYM3IW")
        self.assertEqual(self.client.records["doi:10.5072/FK2/BYM3IW"]["_target"], url)

    def test_delete(self):
        self.prov.create_identifier(self.ds)
        self.prov.delete_identifier(self.ds)
        self.assertNotIn("doi:10.5072/FK2/BYM3IW", self.client.records)
        self.assertFalse(self.prov.already_registered(self.ds))
        with self.assertRaises(PIDNotFound):
            self.prov.delete_identifier(self.ds)

    def test_publicize(self):
        self.assertTrue(self.prov.publicize_identifier(self.ds))
        self.assertTrue(self.ds.identifier_registered)
        self.assertEqual(self.client.records["doi:10.5072/FK2/BYM3IW"]["_status"], "public")

        ds = Dataset()
        self.assertTrue(self.prov.publicize_identifier(ds))
        self.assertTrue(ds.identifier.startswith("FK2/"))
        self.assertEqual(self.client.records[ds.global_id.as_string()]["_status"], "public")

    def test_publicize_failure(self):
        self.client.failing = True
        with self.assertLogs("PID", logging.ERROR):
            self.assertFalse(self.prov.publicize_identifier(self.ds))
        self.assertFalse(self.ds.identifier_registered)

    def test_registry_down_is_unique(self):
        self.client.failing = True
        self.assertTrue(self.prov.is_global_id_unique(self.ds.global_id))
        with self.assertRaises(PIDRegistryException):
            self.prov.already_registered(self.ds)

    def test_unique_checks_registry(self):
        self.assertTrue(self.prov.is_global_id_unique(self.ds.global_id))
        self.prov.create_identifier(self.ds)
        self.assertFalse(self.prov.is_global_id_unique(self.ds.global_id))


if __name__ == '__main__':
    test.main()
