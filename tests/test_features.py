import unittest
from unittest.mock import patch
from rocksbuilder.features import (
    DEFAULT_FEATURES,
    DecisionKind,
    FeatureSet,
    decide,
    decide_all,
    decide_top_level,
    jemalloc_excluded,
)
from rocksbuilder.overrides import OverrideMap
from rocksbuilder.target import classify

LINUX = classify("x86_64-unknown-linux-gnu")

class TestFeatureSet(unittest.TestCase):

    def test_none_gives_defaults(self):
        self.assertEqual(FeatureSet.parse(None), DEFAULT_FEATURES)

    def test_comma_separated(self):
        self.assertEqual(FeatureSet.parse("snappy, lto,,rtti"), {"snappy", "lto", "rtti"})

    def test_empty_string_is_empty_set(self):
        self.assertEqual(FeatureSet.parse(""), frozenset())

    def test_unknown_feature_rejected(self):
        with self.assertRaises(ValueError) as cm:
            FeatureSet.parse(["snappy", "turbo"])
        self.assertIn("turbo", str(cm.exception))


@patch('rocksbuilder.features.logger')
class TestDecide(unittest.TestCase):

    def test_compile_forces_bundled(self, mock_logger):
        overrides = OverrideMap({"SNAPPY_COMPILE": "true", "SNAPPY_LIB_DIR": "/opt/lib"})
        decision = decide("SNAPPY", FeatureSet.parse("snappy"), overrides, LINUX)
        self.assertEqual(decision.kind, DecisionKind.BUILD_BUNDLED)
        self.assertTrue(decision.force_compiled)

    def test_compile_must_be_truthy(self, mock_logger):
        overrides = OverrideMap({"SNAPPY_COMPILE": "no", "SNAPPY_LIB_DIR": "/opt/lib"})
        decision = decide("SNAPPY", FeatureSet.parse("snappy"), overrides, LINUX)
        self.assertTrue(decision.is_link_system)

    def test_lib_dir_links_system(self, mock_logger):
        overrides = OverrideMap({"ZSTD_LIB_DIR": "/opt/zstd/lib", "ZSTD_STATIC": ""})
        decision = decide("ZSTD", FeatureSet.parse("zstd"), overrides, LINUX)
        self.assertTrue(decision.is_link_system)
        self.assertEqual(decision.search_path, "/opt/zstd/lib")
        self.assertTrue(decision.static)
        self.assertEqual(decision.link_mode, "static")
        self.assertEqual(decision.library_name, "zstd")

    def test_lib_dir_without_static_is_dylib(self, mock_logger):
        decision = decide("LZ4", FeatureSet.parse("lz4"), OverrideMap({"LZ4_LIB_DIR": "/x"}), LINUX)
        self.assertEqual(decision.link_mode, "dylib")

    def test_nothing_set_builds_bundled(self, mock_logger):
        decision = decide("SNAPPY", FeatureSet.parse("snappy"), OverrideMap({}), LINUX)
        self.assertTrue(decision.is_bundled)
        self.assertFalse(decision.force_compiled)

    def test_disabled_feature_is_skipped(self, mock_logger):
        decision = decide("SNAPPY", FeatureSet.parse("lz4"), OverrideMap({"SNAPPY_LIB_DIR": "/x"}), LINUX)
        self.assertTrue(decision.is_skip)
        self.assertIn("disabled", decision.reason)

    def test_jemalloc_excluded_platforms(self, mock_logger):
        features = FeatureSet.parse("jemalloc")
        for raw in ("aarch64-linux-android", "x86_64-unknown-linux-musl", "aarch64-apple-darwin", "x86_64-unknown-dragonfly"):
            with self.subTest(raw=raw):
                target = classify(raw)
                self.assertTrue(jemalloc_excluded(target))
                self.assertTrue(decide("JEMALLOC", features, OverrideMap({}), target).is_skip)

    def test_jemalloc_allowed_on_linux_gnu(self, mock_logger):
        decision = decide("JEMALLOC", FeatureSet.parse("jemalloc"), OverrideMap({}), LINUX)
        self.assertTrue(decision.is_bundled)

    def test_decide_all_covers_every_dependency(self, mock_logger):
        decisions = decide_all(FeatureSet.parse(None), OverrideMap({}), LINUX)
        self.assertEqual(list(decisions), ["SNAPPY", "LZ4", "ZSTD", "ZLIB", "BZIP2", "JEMALLOC"])
        self.assertTrue(decisions["JEMALLOC"].is_skip)


@patch('rocksbuilder.features.logger')
class TestDecideTopLevel(unittest.TestCase):

    def test_rocksdb_lib_dir(self, mock_logger):
        decision = decide_top_level(OverrideMap({"ROCKSDB_LIB_DIR": "/usr/lib"}), LINUX)
        self.assertTrue(decision.is_link_system)
        self.assertFalse(decision.system_only)

    def test_bundled_by_default(self, mock_logger):
        self.assertTrue(decide_top_level(OverrideMap({}), LINUX).is_bundled)

    def test_freebsd_uses_system_library(self, mock_logger):
        decision = decide_top_level(OverrideMap({}), classify("x86_64-unknown-freebsd"))
        self.assertTrue(decision.is_link_system)
        self.assertTrue(decision.system_only)
        self.assertEqual(decision.search_path, "/usr/local/lib")

    def test_freebsd_ignores_compile_request(self, mock_logger):
        overrides = OverrideMap({"ROCKSDB_COMPILE": "1", "ROCKSDB_STATIC": "1"})
        decision = decide_top_level(overrides, classify("x86_64-unknown-freebsd"))
        self.assertTrue(decision.system_only)
        self.assertTrue(decision.static)

    def test_freebsd_with_lib_dir_is_regular_system_link(self, mock_logger):
        overrides = OverrideMap({"ROCKSDB_LIB_DIR": "/opt/rocksdb/lib"})
        decision = decide_top_level(overrides, classify("x86_64-unknown-freebsd"))
        self.assertFalse(decision.system_only)
        self.assertEqual(decision.search_path, "/opt/rocksdb/lib")

if __name__ == "__main__":
    unittest.main()
