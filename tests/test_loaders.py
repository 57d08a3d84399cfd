import pytest

from bstree.generator import generate_keys, write_csv
from bstree.loaders import ingest_csv, parse_key
from bstree.tree import BinarySearchTree


def test_parse_key():
    assert parse_key(" 42 ") == 42
    assert parse_key("4.5", "float") == 4.5
    assert parse_key("abc", "str") == "abc"
    assert parse_key("abc") is None
    assert parse_key("") is None
    assert parse_key(None) is None
    assert parse_key(True) is None
    assert parse_key("nan", "float") is None


def test_parse_key_unknown_type():
    with pytest.raises(ValueError):
        parse_key("1", "decimal")


def test_ingest_csv_counts_rows(tmp_path):
    path = tmp_path / "keys.csv"
    path.write_text("key,label\n50,a\n30,b\n50,c\nx,d\n,e\n70,f\n", encoding="utf-8")

    tree = BinarySearchTree()
    counts = ingest_csv(tree, str(path))

    assert counts == {"rows": 6, "inserted": 3, "duplicates": 1, "skipped": 2}
    assert tree.as_list_pre_order() == [50, 30, 70]


def test_ingest_csv_custom_column(tmp_path):
    path = tmp_path / "words.csv"
    path.write_text("word\nbe\nrude\nas\n", encoding="utf-8")

    tree = BinarySearchTree()
    ingest_csv(tree, str(path), key_column="word", key_type="str")
    assert tree.as_list_in_order() == ["as", "be", "rude"]


def test_ingest_csv_missing_column(tmp_path):
    path = tmp_path / "keys.csv"
    path.write_text("value\n1\n", encoding="utf-8")
    with pytest.raises(ValueError):
        ingest_csv(BinarySearchTree(), str(path))


def test_ingest_csv_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        ingest_csv(BinarySearchTree(), str(tmp_path / "absent.csv"))


def test_generated_keys_round_through_csv(tmp_path):
    keys = generate_keys(25, seed=7)
    assert len(set(keys)) == 25

    path = tmp_path / "generated.csv"
    write_csv(str(path), keys)
    tree = BinarySearchTree()
    assert ingest_csv(tree, str(path))["inserted"] == 25
    assert tree.as_list_in_order() == sorted(keys)


def test_generate_keys_range_too_small():
    with pytest.raises(ValueError):
        generate_keys(5, low=0, high=3)
