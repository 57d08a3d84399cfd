import threading

import pytest

import app as playground

SAMPLE = [50, 30, 70, 20, 40, 60, 80]


@pytest.fixture
def client():
    playground.reset_tree(SAMPLE)
    playground.app.config["TESTING"] = True
    with playground.app.test_client() as c:
        yield c
    playground.reset_tree()


def test_status(client):
    r = client.get("/api/status")
    assert r.status_code == 200
    data = r.get_json()["data"]
    assert data["size"] == 7
    assert data["height"] == 3
    assert data["min_height"] == 3
    assert data["root"] == 50


def test_tree_view(client):
    data = client.get("/api/tree").get_json()["data"]
    assert data["in_order"] == [20, 30, 40, 50, 60, 70, 80]
    assert data["pre_order"] == [50, 30, 20, 40, 70, 60, 80]
    assert data["post_order"] == [20, 40, 30, 60, 80, 70, 50]
    assert data["render"].startswith("50\nl:30\tr:70")


def test_render_is_plain_text(client):
    r = client.get("/api/tree/render")
    assert r.mimetype == "text/plain"
    assert r.get_data(as_text=True).splitlines()[0] == "50"


def test_node_lookup(client):
    data = client.get("/api/tree/node/40").get_json()["data"]
    assert data == {"key": 40, "depth": 3, "parent": 30, "left": None, "right": None, "is_leaf": True}


def test_node_lookup_errors(client):
    assert client.get("/api/tree/node/45").status_code == 404
    assert client.get("/api/tree/node/abc").status_code == 400


def test_insert_single_key(client):
    r = client.post("/api/tree/insert", json={"key": 45})
    assert r.status_code == 200
    assert r.get_json()["data"] == {"inserted": 45, "depth": 4, "size": 8}

    r = client.post("/api/tree/insert", json={"key": "45"})
    assert r.status_code == 409
    assert r.get_json()["ok"] is False


def test_insert_many_keys(client):
    r = client.post("/api/tree/insert", json={"keys": [1, 2, 50]})
    assert r.get_json()["data"] == {"inserted": 2, "rejected": 1, "size": 9}


def test_insert_rejects_bad_bodies(client):
    assert client.post("/api/tree/insert", json={}).status_code == 400
    assert client.post("/api/tree/insert", json={"key": "x"}).status_code == 400
    assert client.post("/api/tree/insert", json={"keys": "1,2"}).status_code == 400
    assert client.post("/api/tree/insert", json={"keys": [1, None]}).status_code == 400


def test_remove(client):
    r = client.post("/api/tree/remove/50")
    assert r.status_code == 200
    assert client.get("/api/status").get_json()["data"]["root"] == 60
    assert client.post("/api/tree/remove/50").status_code == 404


def test_rebalance(client):
    client.post("/api/tree/reset", json={"keys": list(range(1, 8))})
    data = client.post("/api/tree/rebalance").get_json()["data"]
    assert data == {"height_before": 7, "height_after": 3, "size": 7}


def test_sorted(client):
    data = client.get("/api/tree/sorted").get_json()["data"]
    assert data == {"count": 7, "keys": [20, 30, 40, 50, 60, 70, 80]}


def test_reset(client):
    r = client.post("/api/tree/reset", json={"keys": [3, 1, 2]})
    assert r.get_json()["data"] == {"inserted": 3, "size": 3}
    assert client.get("/api/tree").get_json()["data"]["pre_order"] == [3, 1, 2]


def test_home_page(client):
    r = client.get("/")
    assert r.status_code == 200
    assert b"Binary Search Tree" in r.data


def test_routes_wait_for_the_tree_lock(client):
    finished = threading.Event()

    def rebalance():
        with playground.app.test_client() as c:
            c.post("/api/tree/rebalance")
        finished.set()

    with playground.TREE_LOCK:
        worker = threading.Thread(target=rebalance)
        worker.start()
        assert not finished.wait(0.2)
    worker.join(5)
    assert finished.is_set()


def test_concurrent_insert_and_rebalance_keep_index_in_sync(client):
    new_keys = list(range(1000, 1100))

    def insert_keys():
        with playground.app.test_client() as c:
            for key in new_keys:
                c.post("/api/tree/insert", json={"key": key})

    def rebalance():
        with playground.app.test_client() as c:
            for _ in range(5):
                c.post("/api/tree/rebalance")

    workers = [threading.Thread(target=insert_keys), threading.Thread(target=rebalance)]
    for worker in workers:
        worker.start()
    for worker in workers:
        worker.join(30)

    in_order = client.get("/api/tree").get_json()["data"]["in_order"]
    sorted_keys = client.get("/api/tree/sorted").get_json()["data"]["keys"]
    assert in_order == sorted_keys == sorted(SAMPLE + new_keys)
