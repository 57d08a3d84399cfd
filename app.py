import os
import threading
import time
from functools import wraps
from typing import Any, Dict, Iterable, List, Optional

from flask import Flask, Response, jsonify, request, render_template_string

from bstree.loaders import ingest_csv, parse_key
from bstree.query_engine import QueryEngine
from bstree.tree import BinarySearchTree

app = Flask(__name__)

DEFAULT_CSV_PATH = os.environ.get("BST_CSV_PATH", os.path.join(os.path.dirname(__file__), "data", "keys.csv"))
KEY_COLUMN = os.environ.get("BST_KEY_COLUMN", "key")
KEY_TYPE = os.environ.get("BST_KEY_TYPE", "int")


def narrate(message: str) -> None:
    print(f"[tree] {message}")


tree = BinarySearchTree(observer=narrate)
engine = QueryEngine(tree)

# one request at a time touches the shared tree
TREE_LOCK = threading.RLock()

STATE: Dict[str, Any] = {"csv_path": None, "tree_loaded": False}


def ok(data=None, **extra):
    payload = {"ok": True}
    if data is not None:
        payload["data"] = data
    payload.update(extra)
    return jsonify(payload)

def err(message: str, status: int = 400, **extra):
    payload = {"ok": False, "error": message}
    payload.update(extra)
    return jsonify(payload), status

def key_or_none(raw: Any) -> Optional[Any]:
    return parse_key(raw, KEY_TYPE)

def with_tree_lock(view):
    @wraps(view)
    def locked(*args, **kwargs):
        with TREE_LOCK:
            return view(*args, **kwargs)
    return locked

def reset_tree(keys: Iterable[Any] = ()) -> int:
    """Empty the shared tree and load keys into it; returns how many were inserted."""
    with TREE_LOCK:
        tree.clear()
        return tree.insert_many(keys)

def warm_start():
    """Load the startup CSV into the tree."""
    csv_path = (DEFAULT_CSV_PATH or "").strip()
    STATE["csv_path"] = csv_path

    if not csv_path:
        print("[warm_start] No CSV path provided.")
        return
    if not os.path.exists(csv_path):
        print(f"[warm_start] CSV not found: {csv_path}")
        return

    print(f"[warm_start] Loading keys from: {csv_path}")
    t0 = time.time()
    try:
        with TREE_LOCK:
            counts = ingest_csv(tree, csv_path, KEY_COLUMN, KEY_TYPE)
    except ValueError as e:
        print(f"[warm_start] {e}")
        return
    t1 = time.time()
    STATE["tree_loaded"] = True
    print(f"[warm_start] Tree loaded: {counts['inserted']:,} keys "
          f"({counts['duplicates']:,} duplicates, {counts['skipped']:,} skipped) in {t1 - t0:.2f}s")


@app.get("/api/status")
@with_tree_lock
def api_status():
    return ok({
        "csv_path": STATE["csv_path"],
        "tree_loaded": STATE["tree_loaded"],
        "key_type": KEY_TYPE,
        **engine.summary(),
    })


@app.get("/api/tree")
@with_tree_lock
def api_tree():
    return ok({**engine.summary(), **engine.traversals(), "render": engine.render()})

@app.get("/api/tree/render")
@with_tree_lock
def api_tree_render():
    return Response(engine.render(), mimetype="text/plain")

@app.get("/api/tree/node/<raw_key>")
@with_tree_lock
def api_tree_node(raw_key: str):
    key = key_or_none(raw_key)
    if key is None:
        return err(f"key must be of type '{KEY_TYPE}'")

    info = engine.node_info(key)
    if info is None:
        return err("key not found", 404)
    return ok(info)

@app.get("/api/tree/sorted")
@with_tree_lock
def api_tree_sorted():
    keys = tree.sorted_keys()
    return ok({"count": len(keys), "keys": keys})


@app.post("/api/tree/insert")
@with_tree_lock
def api_tree_insert():
    data = request.get_json(silent=True) or {}
    if "keys" in data:
        raw_keys = data.get("keys")
        if not isinstance(raw_keys, list):
            return err("'keys' must be a list")
        keys: List[Any] = [key_or_none(k) for k in raw_keys]
        if any(k is None for k in keys):
            return err(f"every key must be of type '{KEY_TYPE}'")
        inserted = tree.insert_many(keys)
        return ok({"inserted": inserted, "rejected": len(keys) - inserted, "size": tree.size()})

    if "key" not in data:
        return err("body must contain 'key' or 'keys'")
    key = key_or_none(data.get("key"))
    if key is None:
        return err(f"key must be of type '{KEY_TYPE}'")
    if not tree.insert(key):
        return err("insert rejected (key already exists)", 409)
    return ok({"inserted": key, "depth": tree.depth(key), "size": tree.size()})

@app.post("/api/tree/remove/<raw_key>")
@with_tree_lock
def api_tree_remove(raw_key: str):
    key = key_or_none(raw_key)
    if key is None:
        return err(f"key must be of type '{KEY_TYPE}'")
    if not tree.remove(key):
        return err("key not found", 404)
    return ok({"removed": key, "size": tree.size()})

@app.post("/api/tree/rebalance")
@with_tree_lock
def api_tree_rebalance():
    result = tree.rebalance()
    return ok({
        "height_before": result.height_before,
        "height_after": result.height_after,
        "size": len(result.keys),
    })

@app.post("/api/tree/reset")
@with_tree_lock
def api_tree_reset():
    data = request.get_json(silent=True) or {}
    raw_keys = data.get("keys", [])
    if not isinstance(raw_keys, list):
        return err("'keys' must be a list")
    keys = [key_or_none(k) for k in raw_keys]
    if any(k is None for k in keys):
        return err(f"every key must be of type '{KEY_TYPE}'")
    inserted = reset_tree(keys)
    return ok({"inserted": inserted, "size": tree.size()})


HTML = r"""
<!doctype html>
<html>
<head>
  <meta charset="utf-8"/>
  <meta name="viewport" content="width=device-width,initial-scale=1"/>
  <title>BST Playground</title>
  <style>
    :root{
      --bg:#041a3a;
      --white:#ffffff;
      --muted:rgba(255,255,255,.75);
      --ink:#0b1b33;
    }
    *{box-sizing:border-box}
    body{
      margin:0;
      min-height:100vh;
      background: radial-gradient(1200px 900px at 20% 10%, #0b2c66 0%, var(--bg) 55%) fixed;
      color:var(--white);
      font-family: ui-sans-serif, system-ui, -apple-system, Segoe UI, Roboto, Arial;
      padding:24px;
    }
    .panel{
      max-width:860px;
      margin:0 auto;
      background: rgba(255,255,255,.06);
      border:1px solid rgba(255,255,255,.14);
      border-radius:22px;
      padding:22px;
    }
    .row{display:flex;gap:10px;flex-wrap:wrap;margin-top:14px;}
    input{flex:1;padding:12px;border-radius:14px;border:none;}
    .btn{
      border:none;
      border-radius:14px;
      padding:10px 14px;
      background:var(--white);
      color:var(--ink);
      font-weight:900;
      cursor:pointer;
    }
    pre{
      background: rgba(0,0,0,.25);
      border-radius:14px;
      padding:14px;
      color:var(--muted);
      overflow:auto;
      tab-size:6;
    }
  </style>
</head>
<body>
<div class="panel">
  <h2>Binary Search Tree</h2>
  <div class="row">
    <input id="key" placeholder="key"/>
    <button class="btn" onclick="run_insert()">Insert</button>
    <button class="btn" onclick="run_remove()">Remove</button>
    <button class="btn" onclick="run_find()">Find</button>
    <button class="btn" onclick="run_rebalance()">Rebalance</button>
  </div>
  <pre id="message"></pre>
  <pre id="tree"></pre>
</div>
<script>
  const el = (id) => document.getElementById(id);

  async function apiGet(url){
    const res = await fetch(url);
    const data = await res.json().catch(()=>({}));
    return { http: res.status, ...data };
  }

  async function apiPost(url, body){
    const res = await fetch(url, {
      method:"POST",
      headers:{"Content-Type":"application/json"},
      body: JSON.stringify(body||{})
    });
    const data = await res.json().catch(()=>({}));
    return { http: res.status, ...data };
  }

  function show(r){
    el("message").textContent = r.ok ? JSON.stringify(r.data, null, 2) : (r.error || "Request failed");
  }

  async function refresh(){
    const r = await apiGet("/api/tree");
    if(!r.ok) return;
    const d = r.data;
    el("tree").textContent =
      `size=${d.size} height=${d.height} (min ${d.min_height})\n` +
      `in-order: ${d.in_order.join(", ")}\n\n${d.render}`;
  }

  async function run_insert(){
    show(await apiPost("/api/tree/insert", { key: el("key").value.trim() }));
    refresh();
  }

  async function run_remove(){
    show(await apiPost(`/api/tree/remove/${encodeURIComponent(el("key").value.trim())}`, {}));
    refresh();
  }

  async function run_find(){
    show(await apiGet(`/api/tree/node/${encodeURIComponent(el("key").value.trim())}`));
  }

  async function run_rebalance(){
    show(await apiPost("/api/tree/rebalance", {}));
    refresh();
  }

  refresh();
</script>
</body>
</html>
"""

@app.get("/")
def home():
    return render_template_string(HTML)

if __name__ == "__main__":
    warm_start()
    app.run(host="127.0.0.1", port=5000, debug=True, use_reloader=False)
