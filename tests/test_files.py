import pytest

from helmify.files import walk


@pytest.fixture
def tree(tmp_path):
    (tmp_path / "a.yaml").write_text("kind: A\n", encoding="utf-8")
    (tmp_path / "b.yaml").write_text("kind: B\n", encoding="utf-8")
    sub = tmp_path / "sub"
    sub.mkdir()
    (sub / "c.yaml").write_text("kind: C\n", encoding="utf-8")
    return tmp_path


def _collect(paths, recursively):
    return [(name, stream.read()) for name, stream in walk(paths, recursively)]


def test_single_file(tree):
    result = _collect([str(tree / "a.yaml")], False)
    assert result == [("a.yaml", "kind: A\n")]


def test_directory_not_recursive_skips_subdirs(tree):
    names = [name for name, _ in _collect([str(tree)], False)]
    assert names == ["a.yaml", "b.yaml"]


def test_directory_recursive_includes_subdirs(tree):
    result = _collect([str(tree)], True)
    assert sorted(name for name, _ in result) == ["a.yaml", "b.yaml", "c.yaml"]
    assert dict(result)["c.yaml"] == "kind: C\n"


def test_missing_path_is_skipped(tree):
    result = _collect([str(tree / "missing.yaml"), str(tree / "b.yaml")], False)
    assert result == [("b.yaml", "kind: B\n")]


def test_paths_keep_given_order(tree):
    names = [name for name, _ in _collect([str(tree / "b.yaml"), str(tree / "a.yaml")], False)]
    assert names == ["b.yaml", "a.yaml"]


def test_streams_closed_after_iteration(tree):
    streams = [stream for _, stream in walk([str(tree)], True)]
    assert len(streams) == 3
    assert all(stream.closed for stream in streams)