#!/usr/bin/env python3


"""
Input : big text
Output : n_grams frequencies (lines '<GRAM> <COUNT>' as read by ngrams.py)
"""

import typing
import argparse
import collections
import unicodedata
import contextlib


ALPHABET = [chr(i) for i in range(ord('a'), ord('z') + 1)]


class Plain:
    """ A plain : list of letters """

    def __init__(self, filename: str) -> None:

        letters: typing.List[str] = list()
        with open(filename, encoding='utf-8') as filepointer:
            for line in filepointer:
                line = line.rstrip('\n')
                if line:
                    # remove accents
                    nfkd_form = unicodedata.normalize('NFKD', line)
                    only_ascii = nfkd_form.encode('ASCII', 'ignore')
                    only_ascii_str = only_ascii.decode()
                    # keep letters only
                    for letter in only_ascii_str.lower():
                        if letter in ALPHABET:
                            letters.append(letter.upper())

        self._plain_str = ''.join(letters)

    def count_ngrams(self, n_value: int) -> typing.Counter[str]:
        """ how many times each n_gram occurs """
        return collections.Counter([self._plain_str[p: p + n_value] for p in range(len(self._plain_str) - n_value + 1)])

    def stats_ngrams(self, file_handle: typing.TextIO, n_value: int) -> None:
        """ stats """

        ngrams_count = self.count_ngrams(n_value)

        with contextlib.redirect_stdout(file_handle):
            for ngram in sorted(ngrams_count, key=lambda n: (-ngrams_count[n], n)):
                num = ngrams_count[ngram]
                print(f"{ngram} {num}")

    @property
    def plain_str(self) -> str:
        """ property """
        return self._plain_str

    def __str__(self) -> str:
        return self._plain_str


def main() -> None:
    """ main """

    parser = argparse.ArgumentParser()
    parser.add_argument('-i', '--input', required=True, help='input file with plain (can have spaces within - will be removed - can have accents - will be corrected)')
    parser.add_argument('-n', '--n_value', required=True, help='n value for ngrams')
    parser.add_argument('-o', '--output', required=True, help='output ngrams frequency file')
    args = parser.parse_args()

    n_value = int(args.n_value)
    assert 1 <= n_value <= 8, "Incorrect value for ngrams"

    plain = Plain(args.input)
    print(f"INFORMATION: Plain has {len(plain.plain_str)} letters")

    with open(args.output, 'w') as file_handle:
        plain.stats_ngrams(file_handle, n_value)


if __name__ == '__main__':
    main()
