import unittest
from unittest.mock import patch
from rocksbuilder.errors import ErrorCode
from rocksbuilder.overrides import DEFAULTS, OverrideMap, Provenance

@patch('rocksbuilder.overrides.logger')
class TestOverrideMap(unittest.TestCase):

    def test_fallback_to_default(self, mock_logger):
        overrides = OverrideMap({})
        resolved = overrides.resolve("GCC_VERSION")
        self.assertEqual(resolved.value, DEFAULTS["GCC_VERSION"])
        self.assertEqual(resolved.provenance, Provenance.DEFAULT)
        self.assertEqual(overrides.mismatches, [])
        mock_logger.info.assert_called_once()
        self.assertIn("not set", overrides.diagnostics[0])

    def test_environment_wins_and_records_mismatch(self, mock_logger):
        overrides = OverrideMap({"GCC_VERSION": "13.2.0"})
        resolved = overrides.resolve("GCC_VERSION")
        self.assertEqual(resolved.value, "13.2.0")
        self.assertEqual(resolved.provenance, Provenance.ENVIRONMENT)
        self.assertEqual(len(overrides.mismatches), 1)
        mismatch = overrides.mismatches[0]
        self.assertEqual(mismatch.code, ErrorCode.OVERRIDE_MISMATCH.value)
        self.assertFalse(mismatch.fatal)
        self.assertEqual(mismatch.context["default"], "14.3.0")
        mock_logger.warning.assert_called_once()

    def test_matching_environment_value(self, mock_logger):
        overrides = OverrideMap({"CLANG_VERSION": "19"})
        resolved = overrides.resolve("CLANG_VERSION")
        self.assertEqual(resolved.provenance, Provenance.ENVIRONMENT)
        self.assertEqual(overrides.mismatches, [])
        self.assertIn("matches default", overrides.diagnostics[0])

    def test_resolution_is_memoised(self, mock_logger):
        overrides = OverrideMap({})
        overrides.resolve("GLIBC_DEV")
        overrides.resolve("GLIBC_DEV")
        self.assertEqual(len(overrides.diagnostics), 1)
        self.assertEqual(list(overrides.resolved()), ["GLIBC_DEV"])

    def test_configured_defaults_replace_builtin(self, mock_logger):
        overrides = OverrideMap({}, {"GCC_PATH": "/usr"})
        self.assertEqual(overrides.value("GCC_PATH"), "/usr")

    def test_explicit_default(self, mock_logger):
        self.assertEqual(OverrideMap({}).value("CXX", "c++"), "c++")

    def test_unknown_name_without_default_is_empty(self, mock_logger):
        self.assertEqual(OverrideMap({}).value("NOT_A_THING"), "")

    def test_is_truthy(self, mock_logger):
        overrides = OverrideMap({"A": "TRUE", "B": "1", "C": "yes", "D": "0"})
        self.assertTrue(overrides.is_truthy("A"))
        self.assertTrue(overrides.is_truthy("B"))
        self.assertFalse(overrides.is_truthy("C"))
        self.assertFalse(overrides.is_truthy("D"))
        self.assertFalse(overrides.is_truthy("E"))

    def test_optional_input_set_in_environment(self, mock_logger):
        overrides = OverrideMap({"SNAPPY_LIB_DIR": "/opt/snappy"})
        self.assertEqual(overrides.lookup("SNAPPY_LIB_DIR"), "/opt/snappy")
        resolved = overrides.resolved()["SNAPPY_LIB_DIR"]
        self.assertEqual(resolved.provenance, Provenance.ENVIRONMENT)
        self.assertEqual(overrides.mismatches, [])
        self.assertIn("SNAPPY_LIB_DIR set in the environment: /opt/snappy", overrides.diagnostics)

    def test_optional_input_absent(self, mock_logger):
        overrides = OverrideMap({})
        self.assertIsNone(overrides.lookup("ZSTD_LIB_DIR"))
        self.assertEqual(overrides.resolved()["ZSTD_LIB_DIR"].provenance, Provenance.DEFAULT)
        self.assertEqual(overrides.diagnostics, [])
        mock_logger.debug.assert_called_once()

    def test_empty_value_counts_as_set(self, mock_logger):
        overrides = OverrideMap({"ZSTD_STATIC": ""})
        self.assertTrue(overrides.is_set("ZSTD_STATIC"))
        self.assertFalse(overrides.is_set("LZ4_STATIC"))

    def test_memo_is_per_default(self, mock_logger):
        overrides = OverrideMap({})
        self.assertEqual(overrides.value("CXX", "c++"), "c++")
        self.assertEqual(overrides.value("CXX", "cl.exe"), "cl.exe")
        self.assertEqual(overrides.value("CXX", "c++"), "c++")
        self.assertEqual(len(overrides.diagnostics), 2)

    def test_host_facts_are_read_raw(self, mock_logger):
        overrides = OverrideMap({"CARGO_CFG_TARGET_POINTER_WIDTH": "32"})
        self.assertEqual(overrides.get("CARGO_CFG_TARGET_POINTER_WIDTH"), "32")
        self.assertEqual(overrides.resolved(), {})

if __name__ == "__main__":
    unittest.main()
