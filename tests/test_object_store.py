import pytest

from haste.errors import HasteError, TransferError


def test_create_container_is_idempotent(fake_store, store_for):
    store = store_for("backups")

    assert store.create_container() == 201
    assert store.create_container() == 202
    assert "backups" in fake_store.containers


def test_create_container_transport_failure_is_fatal(fake_store, store_for):
    store = store_for("backups")
    fake_store.fail_transport_for.add(store.session.container_url)
    with pytest.raises(HasteError, match="Unable to create container"):
        store.create_container()


def test_put_streams_file_body(fake_store, store_for, tmp_path):
    fake_store.containers["backups"] = {}
    source = tmp_path / "report.csv"
    source.write_bytes(b"a,b\n1,2\n")

    store_for("backups").put_object("reports/report.csv", source)

    assert fake_store.containers["backups"]["reports/report.csv"] == b"a,b\n1,2\n"


def test_put_missing_file_raises_os_error(fake_store, store_for, tmp_path):
    fake_store.containers["backups"] = {}
    with pytest.raises(FileNotFoundError):
        store_for("backups").put_object("x", tmp_path / "nope")
    assert fake_store.count("PUT") == 0


def test_put_into_missing_container(store_for, tmp_path):
    source = tmp_path / "f"
    source.write_bytes(b"1")
    with pytest.raises(TransferError) as excinfo:
        store_for("absent").put_object("f", source)
    assert excinfo.value.status == 404


def test_download_creates_parents(fake_store, store_for, tmp_path):
    fake_store.put("backups", "a/b/c.bin", b"\x01\x02" * 100_000)
    destination = tmp_path / "out" / "a" / "b" / "c.bin"

    written = store_for("backups").download_object("a/b/c.bin", destination)

    assert written == 200_000
    assert destination.read_bytes() == b"\x01\x02" * 100_000


def test_download_not_found_leaves_no_file(fake_store, store_for, tmp_path):
    fake_store.containers["backups"] = {}
    destination = tmp_path / "out" / "missing.txt"

    with pytest.raises(TransferError) as excinfo:
        store_for("backups").download_object("missing.txt", destination)

    assert excinfo.value.status == 404
    assert not destination.exists()
    assert not destination.parent.exists()


def test_delete_twice(fake_store, store_for):
    fake_store.put("backups", "k", b"v")
    store = store_for("backups")

    store.delete_object("k")
    with pytest.raises(TransferError) as excinfo:
        store.delete_object("k")
    assert excinfo.value.status == 404


def test_transport_error_is_wrapped(fake_store, store_for):
    store = store_for("backups")
    fake_store.fail_transport_for.add(store.session.object_url("k"))
    with pytest.raises(TransferError, match="connection refused"):
        store.delete_object("k")


def test_keys_with_spaces_round_trip(fake_store, store_for, tmp_path):
    fake_store.containers["backups"] = {}
    source = tmp_path / "with space.txt"
    source.write_text("s")
    store = store_for("backups")

    store.put_object("dir name/with space.txt", source)

    assert list(fake_store.containers["backups"]) == ["dir name/with space.txt"]
    assert store.list_objects_page() == ["dir name/with space.txt"]
    assert store.list_objects_page(marker="dir name/with space.txt") == []
