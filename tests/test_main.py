# MIT License
#
# Copyright (c) 2025 Democratize Technology
#
# Permission is hereby granted, free of charge, to any person obtaining a copy
# of this software and associated documentation files (the "Software"), to deal
# in the Software without restriction, including without limitation the rights
# to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
# copies of the Software, and to permit persons to whom the Software is
# furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in all
# copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
# OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.

"""
Tests for the ``python -m actions_perf_config`` entry point.
"""

import json
import os
from unittest.mock import patch

from actions_perf_config.__main__ import EXIT_INVALID, EXIT_OK, EXIT_UNREADABLE, main


class TestMain:
    """Test exit codes and output selection."""

    def test_success(self, capsys):
        """Test that a valid environment prints the configuration and exits 0."""
        with patch.dict(os.environ, {"MAX_PARALLEL_JOBS": "6"}, clear=True):
            assert main() == EXIT_OK

        out = capsys.readouterr().out
        assert "MAX_PARALLEL_JOBS=6  # environment" in out

    def test_invalid_value(self, capsys):
        """Test that a validation failure exits 1 and lists the problem."""
        with patch.dict(os.environ, {"CACHE_TTL": "30"}, clear=True):
            assert main() == EXIT_INVALID

        out = capsys.readouterr().out
        assert "OUT_OF_RANGE CACHE_TTL=30 (must be 60-86400)" in out

    def test_missing_config_file(self, tmp_path, capsys):
        """Test that an unreadable config file exits 2."""
        environ = {"CONFIG_FILE": str(tmp_path / "missing.conf")}
        with patch.dict(os.environ, environ, clear=True):
            assert main() == EXIT_UNREADABLE

        assert "FILE_NOT_FOUND" in capsys.readouterr().out

    def test_config_file_os_error(self, tmp_path, capsys):
        """Test that any OS error on the config file exits 2 with a report."""
        path = tmp_path / "perf.conf"
        path.symlink_to(path)
        with patch.dict(os.environ, {"CONFIG_FILE": str(path)}, clear=True):
            assert main() == EXIT_UNREADABLE

        assert "PERMISSION_DENIED" in capsys.readouterr().out

    def test_json_output(self, write_file, capsys):
        """Test PERF_OUTPUT_FORMAT=json."""
        path = write_file("perf.conf", "PERF_PROFILE=ci\n")
        environ = {"CONFIG_FILE": str(path), "PERF_OUTPUT_FORMAT": "json"}
        with patch.dict(os.environ, environ, clear=True):
            assert main() == EXIT_OK

        data = json.loads(capsys.readouterr().out)
        assert data["profile"] == "ci"
        assert data["values"]["MAX_PARALLEL_JOBS"] == 2

    def test_unknown_output_format_falls_back_to_text(self, capsys):
        """Test that a bad PERF_OUTPUT_FORMAT still produces output."""
        environ = {"PERF_OUTPUT_FORMAT": "xml", "PERF_LOG_LEVEL": "nonsense"}
        with patch.dict(os.environ, environ, clear=True):
            assert main() == EXIT_OK

        assert capsys.readouterr().out.startswith("# profile: default")
