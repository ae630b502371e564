import argparse

import pytest

from ShiftGame import main, positive_int


def test_positive_int_accepts_window_sizes() -> None:
    assert positive_int("480") == 480


def test_positive_int_rejects_bad_sizes() -> None:
    for text in ("0", "-10", "wide"):
        with pytest.raises(argparse.ArgumentTypeError):
            positive_int(text)


def test_negative_window_size_is_a_usage_error(capsys) -> None:
    with pytest.raises(SystemExit) as exc:
        main(["--width", "-10", "--smoke"])

    assert exc.value.code == 2
    assert "--width" in capsys.readouterr().err
