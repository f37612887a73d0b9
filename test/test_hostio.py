#!/usr/bin/env python3

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

import os
import tempfile
import unittest
from c8core.hostio import Loader


class TestLoader(unittest.TestCase):
    def setUp(self):
        self.loader = Loader()
        self.tmp_dir = tempfile.TemporaryDirectory()

    def tearDown(self):
        self.tmp_dir.cleanup()

    def _write_file(self, name, data):
        filename = os.path.join(self.tmp_dir.name, name)

        with open(filename, "wb") as f:
            f.write(data)

        return filename

    def test_loader_load_binary(self):
        filename = self._write_file("test.ch8", b"\x00\xE0\x12\x02")
        self.assertEqual(b"\x00\xE0\x12\x02", self.loader.load_binary(filename))

    def test_loader_load_text_lines(self):
        filename = self._write_file("trace.txt", b"10 5 down\n20 5 up\n")
        self.assertEqual(["10 5 down", "20 5 up"], self.loader.load_text_lines(filename))

    def test_loader_load_file_missing(self):
        self.assertRaises(FileNotFoundError, self.loader.load_binary, "NoFile.ch8")
