import math
import os

import pytest

import ngrams
from conftest import QUADGRAMS_CORPUS


def test_log_frequencies_and_floor(quadgrams):
    assert quadgrams.size == 4
    assert quadgrams.total == 3400
    assert quadgrams.log_freq_table['tion'] == pytest.approx(math.log10(1000 / 3400))
    assert quadgrams.log_freq_table['that'] == pytest.approx(math.log10(700 / 3400))
    assert quadgrams.floor == pytest.approx(math.log10(0.01 / 3400))


def test_floor_below_every_entry(quadgrams):
    assert all(quadgrams.floor < value for value in quadgrams.log_freq_table.values())


def test_score_is_deterministic(quadgrams):
    text = "thenthethatthin"
    assert quadgrams.score(text) == quadgrams.score(text)


def test_score_scans_last_window(quadgrams):
    assert quadgrams.score("tion") == pytest.approx(quadgrams.log_freq_table['tion'])
    # windows : then hent enth nthe
    expected = 3 * quadgrams.floor + quadgrams.log_freq_table['nthe']
    assert quadgrams.score("thenthe") == pytest.approx(expected)


def test_absent_grams_score_floor_per_window(quadgrams):
    text = "zzzzzzz"
    assert quadgrams.score(text) == pytest.approx(quadgrams.floor * (len(text) - 4 + 1))


def test_text_shorter_than_gram_scores_zero(quadgrams, bigrams):
    assert quadgrams.score("abc") == 0
    assert quadgrams.score("") == 0
    assert bigrams.score("t") == 0


def test_score_ignores_case(bigrams):
    assert bigrams.score("THEIN") == bigrams.score("thein")


def test_contains_and_len(bigrams):
    assert 'th' in bigrams
    assert 'TH' in bigrams
    assert 'zz' not in bigrams
    assert len(bigrams) == 4


def test_duplicated_grams_are_summed():
    model = ngrams.Ngrams([("AB", 1), ("ab", 3)])
    assert model.total == 4
    assert model.log_freq_table == {'ab': 0.}


def test_mixed_sizes_rejected():
    with pytest.raises(ngrams.ParseError, match="size 3 expected 4"):
        ngrams.Ngrams([("TION", 10), ("THE", 5)])


@pytest.mark.parametrize('corpus', [
    [],
    [("T1ON", 4)],
    [("TION", 0)],
    [("TION", -3)],
])
def test_bad_corpus_rejected(corpus):
    with pytest.raises(ngrams.ParseError):
        ngrams.Ngrams(corpus)


def test_parse_error_is_data_error():
    assert issubclass(ngrams.ParseError, ngrams.DataError)


def test_read_corpus_missing_file(tmp_path):
    missing = tmp_path / 'nowhere' / 'quadgrams.txt'
    with pytest.raises(ngrams.DataError) as excinfo:
        ngrams.read_corpus(str(missing))
    assert not isinstance(excinfo.value, ngrams.ParseError)
    assert str(missing) in str(excinfo.value)
    assert excinfo.value.filename == os.path.abspath(str(missing))


def test_read_corpus_skips_blank_lines(write_corpus):
    filename = write_corpus('bigrams.txt', [("TH", 5), ("HE", 4)])
    with open(filename, 'a') as file_handle:
        file_handle.write("\n\n")
    assert ngrams.read_corpus(filename) == [("TH", 5), ("HE", 4)]


@pytest.mark.parametrize('content', [
    "TION 10\nNTHE\n",
    "TION 10\nNTHE nine\n",
    "TION 10\nNTHE 9 extra\n",
])
def test_read_corpus_malformed_line(tmp_path, content):
    path = tmp_path / 'quadgrams.txt'
    path.write_text(content)
    with pytest.raises(ngrams.ParseError) as excinfo:
        ngrams.read_corpus(str(path))
    assert excinfo.value.line_num == 2


def test_load_ngrams(write_corpus):
    model = ngrams.load_ngrams(write_corpus('quadgrams.txt', QUADGRAMS_CORPUS))
    assert model.size == 4
    assert model.total == 3400
    assert model.score("tion") == pytest.approx(math.log10(1000 / 3400))


def test_load_ngrams_mixed_sizes(write_corpus):
    filename = write_corpus('mixed.txt', [("TION", 10), ("TH", 5)])
    with pytest.raises(ngrams.ParseError) as excinfo:
        ngrams.load_ngrams(filename)
    assert excinfo.value.line_num == 2


def test_main_scores_texts(monkeypatch, capsys, write_corpus):
    filename = write_corpus('quadgrams.txt', QUADGRAMS_CORPUS)
    monkeypatch.setattr('sys.argv', ['ngrams.py', '-n', filename, 'tion'])
    ngrams.main()
    assert f"tion = {math.log10(1000 / 3400):f}" in capsys.readouterr().out


def test_main_missing_file(monkeypatch, capsys, tmp_path):
    monkeypatch.setattr('sys.argv', ['ngrams.py', '-n', str(tmp_path / 'missing.txt'), 'tion'])
    with pytest.raises(SystemExit) as excinfo:
        ngrams.main()
    assert excinfo.value.code == 1
    assert "ERROR:" in capsys.readouterr().out
