"""
Bulk loading of keys into a BinarySearchTree from CSV files.

The file needs a header row; one column (default: 'key') holds the keys.
Rows whose key cannot be parsed are skipped and counted, never fatal.
"""

import csv
import os
from typing import Any, Dict, Optional

from bstree.tree import BinarySearchTree

KEY_PARSERS = {
    "int": int,
    "float": float,
    "str": str,
}


def parse_key(raw: Any, key_type: str = "int") -> Optional[Any]:
    """
    Convert a raw value (CSV cell, URL segment, JSON field) to a key.

    Returns None if the value is empty or cannot be parsed. NaN is rejected
    because it has no place in a total order.
    """
    parser = KEY_PARSERS.get(key_type)
    if parser is None:
        raise ValueError(f"Unsupported key type '{key_type}'; expected one of {sorted(KEY_PARSERS)}")
    if raw is None or isinstance(raw, bool):
        return None

    raw_str = str(raw).strip()
    if not raw_str:
        return None
    try:
        key = parser(raw_str)
    except ValueError:
        return None
    if key != key:
        return None
    return key


def ingest_csv(tree: BinarySearchTree, file_path: str, key_column: str = "key",
               key_type: str = "int") -> Dict[str, int]:
    """
    Reads keys from a CSV file and inserts them into tree in file order.

    Returns counters: rows read, keys inserted, duplicates rejected and rows
    skipped because the key was missing or malformed.
    """
    if not os.path.exists(file_path):
        raise FileNotFoundError(f"File not found at {file_path}")

    rows = inserted = duplicates = skipped = 0
    with open(file_path, mode='r', newline='', encoding='utf-8') as csvfile:
        reader = csv.DictReader(csvfile)

        fieldnames = reader.fieldnames or []
        if key_column not in fieldnames:
            raise ValueError(f"key column '{key_column}' not found; available columns: {fieldnames}")

        for row in reader:
            rows += 1
            key = parse_key(row.get(key_column), key_type)
            if key is None:
                skipped += 1
                continue
            if tree.insert(key):
                inserted += 1
            else:
                duplicates += 1

    return {
        "rows": rows,
        "inserted": inserted,
        "duplicates": duplicates,
        "skipped": skipped,
    }
