import threading

import pytest

from instance_store import InstanceStore

pytestmark = pytest.mark.unit


def test_add_creates_empty_instance():
    store = InstanceStore()
    store.add_instance("i1", "com.acme.app")

    instance = store.get_instance("i1")

    assert instance.app_id == "com.acme.app"
    assert instance.node_port is None
    assert instance.window_port is None
    assert instance.log == []


def test_ports_are_first_writer_wins():
    store = InstanceStore()
    store.add_instance("i1", "app")

    store.update_node_port("i1", 9229)
    store.update_node_port("i1", 9999)
    store.update_window_port("i1", "41234")
    store.update_window_port("i1", 1)

    instance = store.get_instance("i1")
    assert instance.node_port == 9229
    assert instance.window_port == 41234


def test_log_keeps_receipt_order():
    store = InstanceStore()
    store.add_instance("i1", "app")

    store.update_log("i1", "A\n")
    store.update_log("i1", "B\n")

    assert store.get_instance("i1").log_text == "A\nB\n"


def test_reads_are_copies():
    store = InstanceStore()
    store.add_instance("i1", "app")
    snapshot = store.get_instance("i1")
    snapshot.log.append("mutated")
    snapshot.node_port = 1

    fresh = store.get_instance("i1")
    assert fresh.log == []
    assert fresh.node_port is None


def test_remove_and_unknown_ids_are_noops():
    store = InstanceStore()
    store.add_instance("i1", "app")
    store.remove_instance("i1")
    store.remove_instance("i1")

    store.update_log("i1", "late output")
    store.update_node_port("i1", 9229)

    assert store.get_instance("i1") is None
    assert store.all_instances() == {}


def test_concurrent_appends_are_not_lost():
    store = InstanceStore()
    store.add_instance("i1", "app")

    def writer(tag):
        for n in range(200):
            store.update_log("i1", f"{tag}{n}\n")

    threads = [threading.Thread(target=writer, args=(tag,)) for tag in "xyz"]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    log = store.get_instance("i1").log
    assert len(log) == 600
    for tag in "xyz":
        assert [c for c in log if c.startswith(tag)] == [f"{tag}{n}\n" for n in range(200)]
