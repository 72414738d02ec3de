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
"""sink.py.

Destinations for rendered documents.
"""
import os
import logging


logger = logging.getLogger(__name__)


class DirectorySink(object):
    """Write each document to '<output_dir>/<ordinal><suffix>'.

    Ordinals are unique within a run, so file names never collide.
    """

    def __init__(self, output_dir, suffix='.json'):
        self.output_dir = os.fspath(output_dir)
        self.suffix = suffix
        os.makedirs(self.output_dir, exist_ok=True)

    def path_for(self, ordinal):
        return os.path.join(
            self.output_dir, '{}{}'.format(ordinal, self.suffix))

    def write(self, ordinal, data):
        path = self.path_for(ordinal)
        with open(path, 'wb') as stm:
            stm.write(data)
        logger.debug('Wrote document %d to %s', ordinal, path)
