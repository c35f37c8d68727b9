import io

import ngrams
import sampler


def make_plain(tmp_path, content):
    path = tmp_path / 'plain.txt'
    path.write_text(content, encoding='utf-8')
    return sampler.Plain(str(path))


def test_plain_keeps_letters_only(tmp_path):
    plain = make_plain(tmp_path, "Thé then,\n\nthe!\n")
    assert plain.plain_str == "THETHENTHE"
    assert str(plain) == "THETHENTHE"


def test_stats_ngrams(tmp_path):
    plain = make_plain(tmp_path, "Thé then,\n\nthe!\n")
    file_handle = io.StringIO()
    plain.stats_ngrams(file_handle, 2)
    assert file_handle.getvalue().splitlines() == ["HE 3", "TH 3", "EN 1", "ET 1", "NT 1"]


def test_output_is_a_valid_corpus(monkeypatch, tmp_path):
    source = tmp_path / 'plain.txt'
    source.write_text("that is the question, then there is the nation\n", encoding='utf-8')
    output = tmp_path / 'quadgrams.txt'
    monkeypatch.setattr('sys.argv', ['sampler.py', '-i', str(source), '-n', '4', '-o', str(output)])
    sampler.main()

    model = ngrams.load_ngrams(str(output))
    assert model.size == 4
    assert model.total == len("thatisthequestionthenthereisthenation") - 4 + 1
    assert 'tion' in model
