from __future__ import annotations

import tempfile
from pathlib import Path

from hypothesis import given, settings
from hypothesis import strategies as st

from brickctl.domain.location import GitLocation, PathLocation, VersionLocation, location_from_dict
from brickctl.domain.manifest import BricksManifest, load_manifest, write_manifest

_text = st.text(alphabet=st.characters(min_codepoint=33, max_codepoint=126), min_size=1, max_size=20)
_versions = st.tuples(st.integers(0, 20), st.integers(0, 20), st.integers(0, 20)).map(
    lambda parts: "^" + ".".join(str(part) for part in parts)
)
_locations = st.one_of(
    _versions.map(VersionLocation),
    _text.map(PathLocation),
    st.builds(
        GitLocation,
        url=_text,
        ref=st.one_of(st.none(), _text),
        path=st.one_of(st.none(), _text),
    ),
)
_names = st.from_regex(r"[a-z][a-z0-9_]{0,15}", fullmatch=True)


@settings(max_examples=100)
@given(location=_locations)
def test_serialized_location_has_single_kind(location) -> None:
    payload = location.to_dict()
    assert len(payload) == 1
    assert location_from_dict(payload) == location


@settings(max_examples=50, deadline=None)
@given(entries=st.dictionaries(_names, _locations, max_size=6))
def test_manifest_written_then_loaded_is_equal(entries) -> None:
    with tempfile.TemporaryDirectory() as tmp:
        target = Path(tmp) / "bricks.yaml"
        write_manifest(target, BricksManifest(entries=entries))
        assert load_manifest(target).entries == entries
