import os
import time

from bstree.generator import generate_keys, write_csv
from bstree.loaders import ingest_csv
from bstree.query_engine import QueryEngine
from bstree.tree import BinarySearchTree

BASE_DIR = os.path.dirname(os.path.abspath(__file__))
CSV_FILE_PATH = os.environ.get("BST_CSV_PATH", os.path.join(BASE_DIR, 'data', 'keys.csv'))
KEY_COLUMN = os.environ.get("BST_KEY_COLUMN", "key")
KEY_TYPE = os.environ.get("BST_KEY_TYPE", "int")
SAMPLE_SIZE = 31


def narrate(message: str) -> None:
    print(f"[tree] {message}")


def run_smoke_test():
    print("--- Binary search tree smoke test ---")
    tree = BinarySearchTree(observer=narrate)

    if not os.path.exists(CSV_FILE_PATH):
        print(f"No key file at {CSV_FILE_PATH}; writing {SAMPLE_SIZE} random keys there.")
        os.makedirs(os.path.dirname(CSV_FILE_PATH) or ".", exist_ok=True)
        write_csv(CSV_FILE_PATH, generate_keys(SAMPLE_SIZE, seed=1337), KEY_COLUMN)

    start_time = time.time()
    counts = ingest_csv(tree, CSV_FILE_PATH, KEY_COLUMN, KEY_TYPE)
    end_time = time.time()

    print(f"Loaded {counts['inserted']} keys from {counts['rows']} rows in {end_time - start_time:.2f}s "
          f"({counts['duplicates']} duplicates, {counts['skipped']} skipped)")
    if tree.is_empty():
        print("No keys loaded.")
        return

    engine = QueryEngine(tree)
    keys = tree.as_list_in_order()
    mid_key = keys[len(keys) // 2]
    print(f"Sample lookup of {mid_key}: {engine.node_info(mid_key)}")
    print(f"Pre-order: {tree.as_list_pre_order()}")
    print(engine.render())

    result = tree.rebalance()
    print(f"Values that were reloaded: {result.keys}")
    print(f"Height: {result.height_before} -> {result.height_after}")
    print(engine.render())


if __name__ == "__main__":
    run_smoke_test()
