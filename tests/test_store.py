import json
import logging

from ShiftGame import STORAGE_KEY, HighScoreStore, JsonFileStore, MemoryStore


def test_missing_high_score_loads_as_zero() -> None:
    assert HighScoreStore(MemoryStore()).load() == 0


def test_unusable_high_scores_load_as_zero() -> None:
    for raw in ("", "abc", "nan", "inf", "-5"):
        assert HighScoreStore(MemoryStore({STORAGE_KEY: raw})).load() == 0


def test_high_score_keeps_fractional_milliseconds() -> None:
    assert HighScoreStore(MemoryStore({STORAGE_KEY: "1234.5"})).load() == 1234.5
    assert HighScoreStore(MemoryStore({STORAGE_KEY: "5000"})).load() == 5000


def test_save_overwrites_unconditionally() -> None:
    store = MemoryStore({STORAGE_KEY: "9000"})
    HighScoreStore(store).save(100)

    assert store.get(STORAGE_KEY) == "100"


def test_json_store_round_trips_and_keeps_other_keys(tmp_path) -> None:
    path = tmp_path / "nested" / "scores.json"
    path.parent.mkdir()
    path.write_text(json.dumps({"other": "x"}), encoding="utf-8")
    store = JsonFileStore(path)

    assert store.get(STORAGE_KEY) is None
    HighScoreStore(store).save(4321)

    assert HighScoreStore(JsonFileStore(path)).load() == 4321
    assert json.loads(path.read_text(encoding="utf-8")) == {"other": "x", STORAGE_KEY: "4321"}
    assert list(path.parent.iterdir()) == [path]


def test_json_store_creates_missing_directory(tmp_path) -> None:
    path = tmp_path / "a" / "b" / "scores.json"

    JsonFileStore(path).set(STORAGE_KEY, "10")

    assert path.exists()


def test_corrupt_json_reads_as_empty(tmp_path, caplog) -> None:
    path = tmp_path / "scores.json"
    path.write_text("{not json", encoding="utf-8")

    with caplog.at_level(logging.WARNING):
        assert JsonFileStore(path).get(STORAGE_KEY) is None
    assert "Could not read" in caplog.text

    path.write_text("[1, 2]", encoding="utf-8")
    assert HighScoreStore(JsonFileStore(path)).load() == 0


def test_write_failure_is_logged_not_raised(tmp_path, caplog) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")
    store = JsonFileStore(blocker / "scores.json")

    with caplog.at_level(logging.WARNING):
        store.set(STORAGE_KEY, "10")

    assert "Could not save" in caplog.text


def test_failed_save_leaves_no_temp_file(tmp_path) -> None:
    target = tmp_path / "scores.json"
    target.mkdir()

    JsonFileStore(target).set(STORAGE_KEY, "10")

    assert [p.name for p in tmp_path.iterdir()] == ["scores.json"]
