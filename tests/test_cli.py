# tests/test_cli.py
# How to run:
#   From repo root: pytest -q
#
# What this covers:
#   - Tags printed one per line, JSON report on request
#   - stdin, --mode hint, --simulate, --replay and --clipboard inputs
#   - Exit codes: 0 ok, 1 no input, 2 invalid events/config/options or undecodable input

import io
import json

import tools.ifl_cli as cli


def test_typed_japanese_with_target_language(capsys):
    rc = cli.main(["--text", "これはテストです。", "--simulate", "typed", "--target-lang", "en"])
    out = capsys.readouterr().out
    assert rc == 0
    assert out.splitlines() == ["translate", "explore"]


def test_paste_hint_on_long_text(capsys):
    rc = cli.main(["--text", "word " * 120, "--mode", "paste"])
    assert rc == 0
    assert capsys.readouterr().out.splitlines() == ["summarize"]


def test_stdin_input(monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO("- first\n- second\n"))
    rc = cli.main([])
    assert rc == 0
    assert capsys.readouterr().out.splitlines() == ["structure"]


def test_json_report(capsys):
    rc = cli.main(["--text", "What is this?", "--json"])
    assert rc == 0
    rec = json.loads(capsys.readouterr().out)
    assert rec["tags"] == ["clarify_question", "explore"]
    assert rec["fired_rules"] == ["clarify_question", "explore_short_query"]
    assert rec["hints"]["scope"] == "broad"
    assert rec["behavior_source"] == "events"
    assert "What is this?" not in json.dumps(rec)


def test_no_input_exits_1(capsys):
    rc = cli.main(["--text", "   "])
    assert rc == 1
    assert "No input" in capsys.readouterr().err


def test_replay_rebuilds_text(tmp_path, capsys):
    body = "x = 1\n" * 100
    records = [{"t_mono": 1.0, "inserted_text": "```\n"},
               {"t_mono": 1.2, "inserted_text": body},
               {"t_mono": 1.4, "inserted_text": "```"}]
    path = tmp_path / "events.json"
    path.write_text(json.dumps(records), encoding="utf-8")
    rc = cli.main(["--replay", str(path)])
    assert rc == 0
    assert capsys.readouterr().out.splitlines() == ["explain", "summarize", "structure"]


def test_replay_out_of_order_exits_2(tmp_path, capsys):
    path = tmp_path / "events.json"
    path.write_text(json.dumps([{"t_mono": 2.0, "inserted_text": "a"},
                                {"t_mono": 1.0, "inserted_text": "b"}]), encoding="utf-8")
    rc = cli.main(["--replay", str(path)])
    assert rc == 2
    assert "Error" in capsys.readouterr().err


def test_bad_config_exits_2(tmp_path, capsys):
    path = tmp_path / "cfg.json"
    path.write_text(json.dumps({"behavior": {"burst_threshold_s": 5.0}}), encoding="utf-8")
    rc = cli.main(["--text", "hello", "--config", str(path)])
    assert rc == 2
    assert "pause_threshold_s" in capsys.readouterr().err


def test_missing_replay_file_exits_2(tmp_path, capsys):
    rc = cli.main(["--replay", str(tmp_path / "nope.json")])
    assert rc == 2


def test_clipboard_input_is_treated_as_paste(monkeypatch, capsys):
    monkeypatch.setattr(cli.pyperclip, "paste", lambda: "lorem ipsum " * 50)
    rc = cli.main(["--clipboard", "--explain"])
    captured = capsys.readouterr()
    assert rc == 0
    assert captured.out.splitlines() == ["summarize"]
    assert "# summarize_long_paste" in captured.err


def test_zero_wpm_exits_2(capsys):
    rc = cli.main(["--text", "hello", "--simulate", "typed", "--wpm", "0"])
    assert rc == 2
    assert "wpm" in capsys.readouterr().err


def test_undecodable_config_exits_2(tmp_path, capsys):
    path = tmp_path / "cfg.json"
    path.write_bytes(b"\xff\xfe{}")
    rc = cli.main(["--text", "hello", "--config", str(path)])
    assert rc == 2
    assert "Error" in capsys.readouterr().err


def test_undecodable_replay_exits_2(tmp_path, capsys):
    path = tmp_path / "events.json"
    path.write_bytes(b'[{"t_mono": 1.0, "inserted_text": "\xff"}]')
    rc = cli.main(["--replay", str(path)])
    assert rc == 2


def test_undecodable_stdin_exits_2(monkeypatch, capsys):
    stdin = io.TextIOWrapper(io.BytesIO(b"caf\xe9 au lait"), encoding="utf-8")
    monkeypatch.setattr("sys.stdin", stdin)
    rc = cli.main([])
    assert rc == 2
