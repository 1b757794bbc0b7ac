import quill.logging_utils as logging_utils


def test_configure_logging_tracks_profile_and_level(monkeypatch) -> None:
    monkeypatch.setattr(logging_utils, "_CONFIGURED", None)

    logging_utils.configure_logging(profile="cli", level="debug")
    assert logging_utils._CONFIGURED == ("cli", "DEBUG")

    logging_utils.configure_logging(profile="default")
    assert logging_utils._CONFIGURED == ("default", "INFO")
