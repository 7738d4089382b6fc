import csv

from batch import main, process_file, run_batch


def test_process_file_ok(tmp_path):
    src = tmp_path / "doc.txt"
    src.write_text("the quick brown fox jumps over the lazy dog\n" * 20)
    result = process_file(src, tmp_path)
    assert result.ok, result.error
    assert result.compressed_bytes < result.original_bytes
    assert (tmp_path / "doc.huff").exists()
    assert (tmp_path / "doc.decompressed.txt").read_text() == src.read_text()


def test_failure_is_isolated_per_file(tmp_path):
    good = tmp_path / "good.txt"
    good.write_text("aaaaab")
    missing = tmp_path / "missing.txt"
    single = tmp_path / "single.txt"
    single.write_text("zzzz")

    results = run_batch([good, missing, single], tmp_path / "out")
    assert [r.ok for r in results] == [True, False, True]
    assert results[1].error.startswith("FileNotFoundError")


def test_bad_encoding_is_reported_not_raised(tmp_path):
    src = tmp_path / "latin.txt"
    src.write_bytes(b"caf\xe9")
    result = process_file(src, tmp_path, encoding="utf-8")
    assert not result.ok
    assert "UnicodeDecodeError" in result.error


def test_main_exit_status_and_csv(tmp_path, capsys):
    good = tmp_path / "good.txt"
    good.write_text("hello huffman")
    report = tmp_path / "results.csv"

    assert main([str(good), "--outdir", str(tmp_path / "out"), "--csv", str(report)]) == 0
    assert main([str(good), str(tmp_path / "nope.txt"), "--outdir", str(tmp_path / "out")]) == 1

    with report.open(newline="") as f:
        rows = list(csv.DictReader(f))
    assert len(rows) == 1
    assert rows[0]["ok"] == "True"
    assert "1/2 files round-tripped" in capsys.readouterr().out
