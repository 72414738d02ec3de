# -*- coding: utf-8 -*-
#
# MIT License
#
# Copyright (c) 2022 Aaron Gibson
#
# Permission is hereby granted, free of charge, to any person obtaining a copy
# of this software and associated documentation files (the "Software"), to deal
# in the Software without restriction, including without limitation the rights
# to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
# copies of the Software, and to permit persons to whom the Software is
# furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in
# all copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
# OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.
#
"""cli_tests.py.

Unittests for the command-line entrypoint.
"""
import io
import os
import shutil
import tempfile
import unittest
import contextlib

import bson

from bsondissect import cli


DOCS = [
    bson.encode({'a': 1}),
    bson.encode({'b': 'x'}),
    bson.encode({'c': [1, 2]}),
]


class CLITests(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()
        self.input = os.path.join(self.tmpdir, 'dump.bson')
        self.output = os.path.join(self.tmpdir, 'out')
        self._write_input(b''.join(DOCS))

    def tearDown(self):
        shutil.rmtree(self.tmpdir)

    def _write_input(self, data):
        with open(self.input, 'wb') as stm:
            stm.write(data)

    def _read_output(self, name):
        with open(os.path.join(self.output, name), 'rb') as stm:
            return stm.read()

    def test_dissect(self):
        self.assertEqual(cli.main(['-q', self.input, self.output]),
                         cli.EXIT_OK)
        self.assertEqual(sorted(os.listdir(self.output)),
                         ['0.json', '1.json', '2.json'])
        self.assertEqual(self._read_output('1.json'), b'{"b":"x"}')

    def test_slice(self):
        code = cli.main(['-q', '--slice', '1..2', self.input, self.output])
        self.assertEqual(code, cli.EXIT_OK)
        self.assertEqual(os.listdir(self.output), ['1.json'])

    def test_empty_slice(self):
        code = cli.main(['-q', '-s', '[2..1]', self.input, self.output])
        self.assertEqual(code, cli.EXIT_OK)
        self.assertEqual(os.listdir(self.output), [])

    def test_pretty(self):
        cli.main(['-q', '--pretty', self.input, self.output])
        self.assertEqual(self._read_output('0.json'), b'{\n  "a": 1\n}')

    def test_prefetch(self):
        code = cli.main(['-q', '-b', '2', self.input, self.output])
        self.assertEqual(code, cli.EXIT_OK)
        self.assertEqual(len(os.listdir(self.output)), 3)

    def test_truncated_input(self):
        self._write_input(DOCS[0] + DOCS[1][:2])
        code = cli.main(['-q', self.input, self.output])
        self.assertEqual(code, cli.EXIT_FAILURE)
        self.assertEqual(os.listdir(self.output), ['0.json'])

    def test_missing_input(self):
        code = cli.main(['-q', os.path.join(self.tmpdir, 'nope.bson'),
                         self.output])
        self.assertEqual(code, cli.EXIT_FAILURE)

    def test_inspect(self):
        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            code = cli.main(['-q', '--inspect', self.input])
        self.assertEqual(code, cli.EXIT_OK)
        lines = out.getvalue().splitlines()
        self.assertEqual(lines[0], '0\t0\t{}'.format(len(DOCS[0])))
        self.assertEqual(len(lines), 3)
        self.assertFalse(os.path.exists(self.output))

    def test_output_required(self):
        with contextlib.redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit) as ctx:
                cli.main([self.input])
        self.assertEqual(ctx.exception.code, 2)

    def test_bad_slice(self):
        with contextlib.redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit) as ctx:
                cli.main(['--slice', 'abc', self.input, self.output])
        self.assertEqual(ctx.exception.code, 2)


if __name__ == '__main__':
    unittest.main()
