import pytest

import ngrams

QUADGRAMS_CORPUS = [("TION", 1000), ("NTHE", 900), ("THER", 800), ("THAT", 700)]
BIGRAMS_CORPUS = [("TH", 500), ("HE", 400), ("IN", 300), ("ER", 200)]


@pytest.fixture
def quadgrams() -> ngrams.Ngrams:
    return ngrams.Ngrams(QUADGRAMS_CORPUS, 'quadgrams')


@pytest.fixture
def bigrams() -> ngrams.Ngrams:
    return ngrams.Ngrams(BIGRAMS_CORPUS, 'bigrams')


@pytest.fixture
def write_corpus(tmp_path):
    """ writes '<GRAM> <COUNT>' lines to a file, returns its path as a string """

    def _write(name, corpus):
        path = tmp_path / name
        path.write_text(''.join(f"{gram} {count}\n" for gram, count in corpus))
        return str(path)

    return _write
