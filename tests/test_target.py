import unittest
from rocksbuilder.target import OsFamily, classify, classify_os

class TestClassifyOs(unittest.TestCase):

    def test_common_triples(self):
        cases = {
            "x86_64-unknown-linux-gnu": OsFamily.LINUX,
            "aarch64-apple-darwin": OsFamily.DARWIN,
            "aarch64-apple-ios": OsFamily.IOS,
            "aarch64-linux-android": OsFamily.ANDROID,
            "x86_64-pc-windows-msvc": OsFamily.WINDOWS_MSVC,
            "x86_64-pc-windows-gnu": OsFamily.WINDOWS_GNU,
            "x86_64-unknown-freebsd": OsFamily.FREEBSD,
            "x86_64-unknown-netbsd": OsFamily.NETBSD,
            "x86_64-unknown-openbsd": OsFamily.OPENBSD,
            "x86_64-unknown-dragonfly": OsFamily.DRAGONFLY,
            "powerpc64-ibm-aix": OsFamily.AIX,
        }
        for raw, family in cases.items():
            with self.subTest(raw=raw):
                self.assertEqual(classify_os(raw), family)

    def test_android_wins_over_linux(self):
        """Android triples contain 'linux' but must classify as android."""
        self.assertEqual(classify_os("armv7-linux-androideabi"), OsFamily.ANDROID)

    def test_ios_wins_over_darwin(self):
        self.assertEqual(classify_os("x86_64-apple-ios-macabi"), OsFamily.IOS)

    def test_unknown_target_is_other(self):
        self.assertEqual(classify_os("wasm32-unknown-unknown"), OsFamily.OTHER)
        self.assertEqual(classify_os(""), OsFamily.OTHER)


class TestClassify(unittest.TestCase):

    def test_linux_descriptor(self):
        target = classify("x86_64-unknown-linux-gnu")
        self.assertEqual(target.architecture, "x86_64")
        self.assertEqual(target.abi_segments, ("unknown", "linux", "gnu"))
        self.assertEqual(target.pointer_width, 64)
        self.assertEqual(target.endianness, "little")
        self.assertFalse(target.is_windows)

    def test_pointer_width_inferred_from_architecture(self):
        self.assertEqual(classify("i686-unknown-linux-gnu").pointer_width, 32)
        self.assertEqual(classify("armv7-linux-androideabi").pointer_width, 32)
        self.assertEqual(classify("s390x-unknown-linux-gnu").pointer_width, 64)

    def test_pointer_width_of_irregular_names(self):
        self.assertEqual(classify("sparcv9-sun-solaris").pointer_width, 64)
        self.assertEqual(classify("x86_64-unknown-linux-gnux32").pointer_width, 32)
        self.assertEqual(classify("aarch64-unknown-linux-gnu_ilp32").pointer_width, 32)
        self.assertEqual(classify("mips64-unknown-linux-gnuabin32").pointer_width, 32)
        self.assertEqual(classify("mips64-unknown-linux-gnuabi64").pointer_width, 64)

    def test_reported_values_take_precedence(self):
        target = classify("x86_64-unknown-linux-gnu", pointer_width="32", endianness="big")
        self.assertEqual(target.pointer_width, 32)
        self.assertEqual(target.endianness, "big")

    def test_invalid_reported_width_is_ignored(self):
        self.assertEqual(classify("aarch64-unknown-linux-gnu", pointer_width="wide").pointer_width, 64)

    def test_big_endian_architecture(self):
        self.assertEqual(classify("powerpc64-unknown-linux-gnu").endianness, "big")
        self.assertEqual(classify("mips-unknown-linux-gnu").endianness, "big")

    def test_windows_targets(self):
        self.assertTrue(classify("x86_64-pc-windows-msvc").is_windows)
        self.assertTrue(classify("x86_64-pc-windows-gnu").is_windows)

    def test_segment(self):
        target = classify("x86_64-pc-windows-gnu")
        self.assertEqual(target.segment(2), "windows")
        self.assertIsNone(target.segment(7))
        self.assertIsNone(classify("weird").segment(2))

    def test_unknown_target_is_total(self):
        target = classify("riscv64gc-unknown-none-elf")
        self.assertEqual(target.os_family, OsFamily.OTHER)
        self.assertEqual(target.pointer_width, 64)
        self.assertEqual(target.to_dict()["os_family"], "other")

if __name__ == "__main__":
    unittest.main()
