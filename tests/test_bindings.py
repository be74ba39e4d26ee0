import os
import shutil
import tempfile
import unittest
from unittest.mock import patch
from rocksbuilder import bindings
from rocksbuilder.errors import BindingGenerationFailure, ErrorCode, PreconditionMissing
from rocksbuilder.overrides import OverrideMap

ENV = {
    "GLIBC_DEV": "/glibc",
    "GCC_PATH": "/gcc",
    "GCC_VERSION": "14",
    "LIBCLANG_PATH": "/clang/lib/",
    "CLANG_VERSION": "19",
    "LLVM_CONFIG_PATH": "/llvm/lib",
    "LLVM_CONFIG": "/llvm/bin/llvm-config",
}

@patch('rocksbuilder.overrides.logger')
class TestBindings(unittest.TestCase):

    def setUp(self):
        self.test_dir = tempfile.mkdtemp()
        header_dir = os.path.join(self.test_dir, "rocksdb", "include", "rocksdb")
        os.makedirs(header_dir)
        with open(os.path.join(header_dir, "c.h"), "w") as f:
            f.write("/* c api */\n")

    def tearDown(self):
        shutil.rmtree(self.test_dir)

    def test_clang_arguments(self, mock_logger):
        args = bindings.clang_arguments(OverrideMap(ENV))
        self.assertEqual(args, [
            "-I", "/gcc/include/c++/14/",
            "-I", "/clang/lib/clang/19/include/",
            "-I", "/clang/lib/clang/19/include/llvm_libc_wrappers/",
            "-B", "/glibc/lib",
            "-idirafter", "/glibc/include",
        ])

    def test_generator_environment(self, mock_logger):
        env = dict(bindings.generator_environment(OverrideMap(ENV)))
        self.assertEqual(env["LIBCLANG_PATH"], "/clang/lib/")
        self.assertEqual(env["LLVM_CONFIG"], "/llvm/bin/llvm-config")
        self.assertEqual(
            env["BINDGEN_EXTRA_CLANG_ARGS"],
            "-B/glibc/lib -idirafter /glibc/include -idirafter /gcc/include/c++/14/",
        )

    def test_build_descriptor(self, mock_logger):
        descriptor = bindings.build(OverrideMap(ENV), source_root=self.test_dir)
        self.assertTrue(descriptor.header_path.endswith(os.path.join("rocksdb", "include", "rocksdb", "c.h")))
        self.assertEqual(descriptor.type_blocklist, ("max_align_t",))
        self.assertFalse(descriptor.derive_debug)

        command = descriptor.command("/out/bindings.rs")
        self.assertEqual(command[:4], ["bindgen", descriptor.header_path, "-o", "/out/bindings.rs"])
        self.assertIn("--no-derive-debug", command)
        self.assertEqual(command[command.index("--blocklist-type") + 1], "max_align_t")
        self.assertEqual(command[command.index("--ctypes-prefix") + 1], "libc")
        self.assertNotIn("--no-size_t-is-usize", command)
        self.assertEqual(command[command.index("--") + 1:], list(descriptor.include_flags))

    def test_missing_header(self, mock_logger):
        with self.assertRaises(PreconditionMissing) as cm:
            bindings.build(OverrideMap(ENV), header_location="nope/c.h", source_root=self.test_dir)
        self.assertEqual(cm.exception.code, ErrorCode.PRECONDITION.value)

    @patch('rocksbuilder.bindings.logger')
    @patch('rocksbuilder.bindings.run_shell_command', return_value=("", "", 0))
    def test_generate(self, mock_run, mock_bindings_logger, mock_logger):
        descriptor = bindings.build(OverrideMap(ENV), source_root=self.test_dir)
        out_dir = os.path.join(self.test_dir, "out")
        out_path = bindings.generate(descriptor, out_dir, {"PATH": "/usr/bin"})
        self.assertEqual(out_path, os.path.join(out_dir, "bindings.rs"))
        self.assertTrue(os.path.isdir(out_dir))
        _, kwargs = mock_run.call_args
        self.assertEqual(kwargs["env"]["PATH"], "/usr/bin")
        self.assertEqual(kwargs["env"]["LIBCLANG_PATH"], "/clang/lib/")

    @patch('rocksbuilder.bindings.logger')
    @patch('rocksbuilder.bindings.run_shell_command', return_value=("", "libclang not found", 1))
    def test_generate_failure(self, mock_run, mock_bindings_logger, mock_logger):
        descriptor = bindings.build(OverrideMap(ENV), source_root=self.test_dir)
        with self.assertRaises(BindingGenerationFailure) as cm:
            bindings.generate(descriptor, os.path.join(self.test_dir, "out"), {})
        self.assertEqual(cm.exception.code, ErrorCode.BINDING.value)
        self.assertIn("libclang not found", str(cm.exception))

if __name__ == "__main__":
    unittest.main()
