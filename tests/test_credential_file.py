import errno
import json
import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from pyons.core.property import FactoryProperty

LOGGER_NAME = "pyons.core.property"


class TestCredentialFile(unittest.TestCase):

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp_dir = Path(self._tmp.name)
        self.credential_path = self.tmp_dir / "ons" / "credential"
        self.credential_path.parent.mkdir(parents=True)

    def tearDown(self):
        self._tmp.cleanup()

    def _write(self, content):
        self.credential_path.write_text(content, encoding="utf-8")

    def test_well_formed_file_is_imported(self):
        """Test that the four credential keys are imported from the file."""
        self._write(json.dumps({
            "AccessKey": "ak",
            "SecretKey": "sk",
            "NAMESRV_ADDR": "1.2.3.4:9876",
            "GroupId": "G1",
        }))

        properties = FactoryProperty(credential_path=self.credential_path)

        self.assertEqual(properties.get_access_key(), "ak")
        self.assertEqual(properties.get_secret_key(), "sk")
        self.assertEqual(properties.get_name_srv_addr(), "1.2.3.4:9876")
        self.assertEqual(properties.get_group_id(), "G1")
        self.assertEqual(properties.get_producer_id(), "G1")
        self.assertEqual(properties.get_consumer_id(), "G1")
        self.assertTrue(properties)

    def test_other_fields_are_ignored(self):
        self._write(json.dumps({"MessageModel": "BOGUS", "ONSAddr": "http://x", "GroupId": "G1"}))

        properties = FactoryProperty(credential_path=self.credential_path)

        self.assertEqual(properties.get_message_model(), "CLUSTERING")
        self.assertEqual(properties.get_name_srv_domain(), "")
        self.assertEqual(properties.get_group_id(), "G1")

    def test_malformed_file_leaves_defaults(self):
        """Test that a non-JSON file is logged and otherwise ignored."""
        self._write("AccessKey=ak\nSecretKey=sk\n")

        with self.assertLogs(LOGGER_NAME, level="WARNING") as logs:
            properties = FactoryProperty(credential_path=self.credential_path)

        self.assertIn("Failed to parse config JSON", "".join(logs.output))
        self.assertEqual(properties.get_factory_properties(), FactoryProperty.DEFAULTS)

    def test_array_top_level_is_a_parse_failure(self):
        self._write(json.dumps([{"AccessKey": "ak"}]))

        with self.assertLogs(LOGGER_NAME, level="WARNING"):
            properties = FactoryProperty(credential_path=self.credential_path)

        self.assertEqual(properties.get_access_key(), "")

    def test_missing_file_is_skipped(self):
        with self.assertLogs(LOGGER_NAME, level="INFO") as logs:
            properties = FactoryProperty(credential_path=self.tmp_dir / "nope")

        self.assertIn("No default config file found", "".join(logs.output))
        self.assertEqual(properties.get_factory_properties(), FactoryProperty.DEFAULTS)

    def test_directory_is_skipped(self):
        properties = FactoryProperty(credential_path=self.credential_path.parent)
        self.assertEqual(properties.get_factory_properties(), FactoryProperty.DEFAULTS)

    def test_rejected_value_is_logged_and_skipped(self):
        """Test that an empty AccessKey in the file does not abort construction."""
        self._write(json.dumps({"AccessKey": "", "SecretKey": "sk", "GroupId": "G1"}))

        with self.assertLogs(LOGGER_NAME, level="WARNING") as logs:
            properties = FactoryProperty(credential_path=self.credential_path)

        self.assertIn("Ignoring AccessKey", "".join(logs.output))
        self.assertEqual(properties.get_access_key(), "")
        self.assertEqual(properties.get_secret_key(), "sk")
        self.assertEqual(properties.get_group_id(), "G1")
        self.assertFalse(properties)

    def test_unreadable_location_is_skipped(self):
        """Test that a permission error while probing the file is only logged."""
        self._write(json.dumps({"AccessKey": "ak"}))

        with patch("pathlib.Path.is_file", side_effect=PermissionError(errno.EACCES, "Permission denied")):
            with self.assertLogs(LOGGER_NAME, level="WARNING") as logs:
                properties = FactoryProperty(credential_path=self.credential_path)

        self.assertIn("Failed to inspect config file", "".join(logs.output))
        self.assertEqual(properties.get_factory_properties(), FactoryProperty.DEFAULTS)

    def test_deeply_nested_json_is_a_parse_failure(self):
        self._write("[" * 100000 + "]" * 100000)

        with self.assertLogs(LOGGER_NAME, level="WARNING") as logs:
            properties = FactoryProperty(credential_path=self.credential_path)

        self.assertIn("Failed to parse config JSON", "".join(logs.output))
        self.assertEqual(properties.get_factory_properties(), FactoryProperty.DEFAULTS)

    def test_non_string_value_is_skipped(self):
        self._write(json.dumps({"NAMESRV_ADDR": 9876, "GroupId": "G1"}))

        with self.assertLogs(LOGGER_NAME, level="WARNING"):
            properties = FactoryProperty(credential_path=self.credential_path)

        self.assertEqual(properties.get_name_srv_addr(), "")
        self.assertEqual(properties.get_group_id(), "G1")

    def test_file_overwrites_nothing_but_its_keys(self):
        self._write(json.dumps({"AccessKey": "ak"}))
        properties = FactoryProperty(credential_path=self.credential_path)
        expected = dict(FactoryProperty.DEFAULTS, AccessKey="ak")
        self.assertEqual(properties.get_factory_properties(), expected)

    def test_load_credential_false_skips_file(self):
        self._write(json.dumps({"AccessKey": "ak"}))
        properties = FactoryProperty(credential_path=self.credential_path, load_credential=False)
        self.assertEqual(properties.get_access_key(), "")

    def test_default_path_under_home(self):
        """Test that the default path is <home>/ons/credential."""
        self._write(json.dumps({"SecretKey": "sk"}))

        with patch("pyons.core.property.default_credential_path", return_value=self.credential_path):
            properties = FactoryProperty()

        self.assertEqual(properties.get_secret_key(), "sk")

    def test_no_home_directory_is_skipped(self):
        with patch("pyons.core.property.default_credential_path", return_value=None):
            properties = FactoryProperty()
        self.assertEqual(properties.get_factory_properties(), FactoryProperty.DEFAULTS)


class TestCredentialPath(unittest.TestCase):

    def test_default_credential_path_uses_home(self):
        from pyons.utils.environment import default_credential_path

        with tempfile.TemporaryDirectory() as tmp_dir:
            with patch("pyons.utils.environment.Path.home", return_value=Path(tmp_dir)):
                self.assertEqual(default_credential_path(), Path(tmp_dir) / "ons" / "credential")

    def test_unknown_home_gives_no_path(self):
        from pyons.utils.environment import default_credential_path, home_directory

        with patch("pyons.utils.environment.Path.home", side_effect=RuntimeError("no home")):
            self.assertIsNone(home_directory())
            self.assertIsNone(default_credential_path())

    @unittest.skipIf(os.name != "posix", "HOME lookup is POSIX specific")
    def test_home_from_environment(self):
        from pyons.utils.environment import home_directory

        with tempfile.TemporaryDirectory() as tmp_dir:
            with patch.dict(os.environ, {"HOME": tmp_dir}):
                self.assertEqual(home_directory(), Path(tmp_dir))


if __name__ == '__main__':
    unittest.main()
