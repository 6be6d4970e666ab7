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
Tests for profile models, inheritance expansion and profile files.

Tests cover:
- Parent-first, last-write-wins expansion
- Cycle detection with the rendered cycle path
- Unknown profiles and parents
- The implicit baseline profile
- Loading YAML and JSON profile tables
"""

import json

from pydantic import ValidationError
import pytest

from actions_perf_config.config import (
    BUILTIN_PROFILES,
    ErrorKind,
    Profile,
    expand_profile,
    load_profile_table,
)
from actions_perf_config.exceptions import (
    CircularProfileError,
    SourceError,
    UnknownProfileError,
)


class TestProfileModel:
    """Test the Profile model."""

    def test_scalar_settings_rendered(self):
        """Test that YAML-style typed values become raw strings."""
        profile = Profile(name="ci", settings={"DRY_RUN": True, "MAX_PARALLEL_JOBS": 2})

        assert profile.settings == {"DRY_RUN": "true", "MAX_PARALLEL_JOBS": "2"}

    def test_single_parent_shorthand(self):
        """Test that a bare parent name is accepted."""
        assert Profile(name="child", inherits="base").inherits == ("base",)

    def test_unknown_fields_rejected(self):
        """Test that typos in profile bodies are not silently ignored."""
        with pytest.raises(ValidationError):
            Profile(name="ci", setings={"DRY_RUN": "true"})

    def test_profiles_are_frozen(self):
        """Test that neither a profile nor its settings can be modified."""
        profile = Profile(name="ci", settings={"LOG_LEVEL": "WARN"})
        with pytest.raises(ValidationError):
            profile.name = "other"
        with pytest.raises(TypeError):
            profile.settings["LOG_LEVEL"] = "DEBUG"
        with pytest.raises(TypeError):
            Profile(name="empty").settings["DRY_RUN"] = "true"

    def test_settings_copied_from_input(self):
        """Test that mutating the constructor input does not change the profile."""
        settings = {"LOG_LEVEL": "WARN"}
        profile = Profile(name="ci", settings=settings)

        settings["LOG_LEVEL"] = "DEBUG"

        assert profile.settings["LOG_LEVEL"] == "WARN"

    def test_builtin_table_is_read_only(self):
        """Test that built-in profiles cannot be replaced or edited in place."""
        with pytest.raises(TypeError):
            BUILTIN_PROFILES["production"] = Profile(name="production")
        with pytest.raises(TypeError):
            BUILTIN_PROFILES["production"].settings["LOG_LEVEL"] = "DEBUG"

        assert BUILTIN_PROFILES["production"].settings == {"LOG_LEVEL": "WARN"}


class TestExpandProfile:
    """Test inheritance flattening."""

    def test_documented_inheritance_scenario(self, prod_profiles):
        """Test PROD_LARGE inheriting LOG_LEVEL from PROD_BASE."""
        source = expand_profile("PROD_LARGE", prod_profiles)

        assert source.origin == "profile:PROD_LARGE"
        assert dict(source.values) == {"LOG_LEVEL": "WARN", "MAX_PARALLEL_JOBS": "16"}

    def test_child_overrides_parent(self):
        """Test that the child's own settings are applied last."""
        table = {
            "base": Profile(name="base", settings={"LOG_LEVEL": "WARN", "DRY_RUN": "true"}),
            "child": Profile(name="child", inherits=("base",), settings={"LOG_LEVEL": "DEBUG"}),
        }

        assert dict(expand_profile("child", table).values) == {
            "LOG_LEVEL": "DEBUG",
            "DRY_RUN": "true",
        }

    def test_parents_applied_in_declared_order(self):
        """Test that a later parent wins over an earlier one."""
        table = {
            "fast": Profile(name="fast", settings={"MAX_PARALLEL_JOBS": "16"}),
            "safe": Profile(name="safe", settings={"MAX_PARALLEL_JOBS": "2", "DRY_RUN": "true"}),
            "mixed": Profile(name="mixed", inherits=("fast", "safe")),
        }

        assert expand_profile("mixed", table).values["MAX_PARALLEL_JOBS"] == "2"

    def test_diamond_is_not_a_cycle(self):
        """Test that a shared ancestor reached twice is allowed."""
        table = {
            "root": Profile(name="root", settings={"LOG_LEVEL": "INFO"}),
            "left": Profile(name="left", inherits=("root",)),
            "right": Profile(name="right", inherits=("root",)),
            "leaf": Profile(name="leaf", inherits=("left", "right")),
        }

        assert dict(expand_profile("leaf", table).values) == {"LOG_LEVEL": "INFO"}

    def test_two_profile_cycle(self):
        """Test that A -> B -> A is detected and rendered."""
        table = {
            "A": Profile(name="A", inherits=("B",)),
            "B": Profile(name="B", inherits=("A",)),
        }

        with pytest.raises(CircularProfileError) as exc_info:
            expand_profile("A", table)

        error = exc_info.value
        assert error.cycle == ["A", "B", "A"]
        assert error.diagnostic.kind is ErrorKind.CIRCULAR_PROFILE
        assert error.diagnostic.value == "A -> B -> A"
        assert error.error_code == "PCF_2002"

    def test_cycle_below_the_requested_profile(self):
        """Test that the rendered cycle excludes the non-cyclic prefix."""
        table = {
            "top": Profile(name="top", inherits=("A",)),
            "A": Profile(name="A", inherits=("B",)),
            "B": Profile(name="B", inherits=("A",)),
        }

        with pytest.raises(CircularProfileError) as exc_info:
            expand_profile("top", table)

        assert exc_info.value.cycle == ["A", "B", "A"]

    def test_self_inheritance(self):
        """Test that a profile inheriting itself is a cycle."""
        table = {"loop": Profile(name="loop", inherits=("loop",))}

        with pytest.raises(CircularProfileError):
            expand_profile("loop", table)

    def test_unknown_profile_lists_known_names(self, prod_profiles):
        """Test that the error enumerates the available profiles."""
        with pytest.raises(UnknownProfileError) as exc_info:
            expand_profile("PROD_HUGE", prod_profiles)

        error = exc_info.value
        assert error.known_profiles == ["PROD_BASE", "PROD_LARGE", "default"]
        assert "known profiles: PROD_BASE, PROD_LARGE, default" in error.diagnostic.message
        assert error.diagnostic.kind is ErrorKind.UNKNOWN_PROFILE

    def test_unknown_parent(self):
        """Test that a missing parent names the profile that inherits it."""
        table = {"child": Profile(name="child", inherits=("ghost",))}

        with pytest.raises(UnknownProfileError) as exc_info:
            expand_profile("child", table)

        assert "inherited by child" in exc_info.value.diagnostic.message

    def test_baseline_always_exists(self):
        """Test that the baseline profile expands to nothing when undeclared."""
        source = expand_profile("default", {})

        assert len(source) == 0
        assert source.origin == "profile:default"

    def test_builtin_profiles_expand(self):
        """Test that every built-in profile is well formed."""
        for name in BUILTIN_PROFILES:
            expand_profile(name, BUILTIN_PROFILES)

        large = expand_profile("production-large", BUILTIN_PROFILES)
        assert large.values["LOG_LEVEL"] == "WARN"
        assert large.values["MAX_PARALLEL_JOBS"] == "16"


class TestLoadProfileTable:
    """Test reading profile tables from disk."""

    def test_yaml_table(self, write_file):
        """Test a YAML profile file with inheritance and typed scalars."""
        path = write_file(
            "profiles.yaml",
            "profiles:\n"
            "  nightly:\n"
            "    inherits: production\n"
            "    settings:\n"
            "      ENABLE_BENCHMARKS: true\n"
            "      BENCHMARK_ITERATIONS: 25\n",
        )

        table = load_profile_table(path, base=BUILTIN_PROFILES)

        nightly = table["nightly"]
        assert nightly.inherits == ("production",)
        assert nightly.settings == {"ENABLE_BENCHMARKS": "true", "BENCHMARK_ITERATIONS": "25"}
        assert "production" in table
        assert expand_profile("nightly", table).values["LOG_LEVEL"] == "WARN"

    def test_json_table_replaces_builtin(self, write_file):
        """Test that a file entry replaces a built-in profile of the same name."""
        path = write_file(
            "profiles.json",
            json.dumps({"profiles": {"ci": {"settings": {"MAX_PARALLEL_JOBS": "6"}}}}),
        )

        table = load_profile_table(path, base=BUILTIN_PROFILES)

        assert table["ci"].settings == {"MAX_PARALLEL_JOBS": "6"}
        assert BUILTIN_PROFILES["ci"].settings["MAX_PARALLEL_JOBS"] == "2"
        with pytest.raises(TypeError):
            table["extra"] = Profile(name="extra")

    def test_empty_file(self, write_file):
        """Test that an empty YAML file yields only the base profiles."""
        path = write_file("profiles.yml", "")

        assert load_profile_table(path) == {}

    def test_missing_file(self, tmp_path):
        """Test that a missing profile file is a source error."""
        with pytest.raises(SourceError) as exc_info:
            load_profile_table(tmp_path / "missing.yaml")

        assert exc_info.value.diagnostic.kind is ErrorKind.FILE_NOT_FOUND

    def test_directory_is_not_a_file(self, tmp_path):
        """Test that pointing at a directory reports FILE_NOT_FOUND."""
        with pytest.raises(SourceError) as exc_info:
            load_profile_table(tmp_path)

        assert exc_info.value.diagnostic.kind is ErrorKind.FILE_NOT_FOUND

    def test_symlink_loop(self, tmp_path):
        """Test that other OS errors are source errors rather than crashes."""
        path = tmp_path / "profiles.yaml"
        path.symlink_to(path)

        with pytest.raises(SourceError) as exc_info:
            load_profile_table(path)

        assert exc_info.value.diagnostic.kind is ErrorKind.PERMISSION_DENIED
        assert "could not be read" in exc_info.value.diagnostic.message

    @pytest.mark.parametrize(
        ("name", "content"),
        [
            ("broken.yaml", "profiles: [unclosed\n"),
            ("broken.json", "{not json"),
            ("list.yaml", "profiles:\n  - ci\n"),
            ("body.yaml", "profiles:\n  ci: just-a-string\n"),
            ("field.yaml", "profiles:\n  ci:\n    settngs: {}\n"),
            ("toplevel.json", "[1, 2]"),
        ],
    )
    def test_malformed_files(self, write_file, name, content):
        """Test that structural problems are reported as syntax errors."""
        path = write_file(name, content)

        with pytest.raises(SourceError) as exc_info:
            load_profile_table(path)

        assert exc_info.value.diagnostic.kind is ErrorKind.SYNTAX_ERROR
