#!/usr/bin/env python3


"""
N-Grams frequency model.
Reads a file of lines '<GRAM> <COUNT>' (all grams of same size N)
and scores a text by adding log frequencies of all its N-grams.
"""

import os
import sys
import time
import math
import argparse
import collections
import typing
import pprint

ALPHABET = [chr(i) for i in range(ord('a'), ord('z') + 1)]  # plain always lower case

# deliberately pessimistic : missing n-gram counts as a hundredth of an occurence
FLOOR_OCCURENCES = 0.01


class DataError(Exception):
    """ Problem with a frequency source (file missing or unreadable) """

    def __init__(self, message: str, filename: typing.Optional[str] = None) -> None:
        super().__init__(message)
        self.filename = filename


class ParseError(DataError):
    """ Problem with the content of a frequency source """

    def __init__(self, message: str, filename: typing.Optional[str] = None, line_num: typing.Optional[int] = None) -> None:
        if line_num is not None:
            message = f"{message} (line {line_num})"
        if filename is not None:
            message = f"{message} in '{filename}'"
        super().__init__(message, filename)
        self.line_num = line_num


def read_corpus(filename: str) -> typing.List[typing.Tuple[str, int]]:
    """ Reads a n_gram frequency file into (n_gram, occurences) pairs """

    full_path = os.path.abspath(filename)
    if not os.path.isfile(full_path):
        raise DataError(f"File does not exist! {full_path}", full_path)

    corpus: typing.List[typing.Tuple[str, int]] = list()
    try:
        with open(full_path) as filepointer:
            for num_line, line in enumerate(filepointer):
                line = line.rstrip('\n')
                if not line.strip():
                    continue
                fields = line.split()
                if len(fields) != 2:
                    raise ParseError(f"Expected '<GRAM> <COUNT>' got '{line}'", full_path, num_line + 1)
                n_gram_read, frequency_str = fields
                try:
                    frequency = int(frequency_str)
                except ValueError as exception:
                    raise ParseError(f"Count '{frequency_str}' is not a number", full_path, num_line + 1) from exception
                corpus.append((n_gram_read, frequency))
    except (OSError, UnicodeDecodeError) as exception:
        raise DataError(f"Cannot read file {full_path} : {exception}", full_path) from exception

    return corpus


class Ngrams:
    """ Ngrams : says the frequency of N grams (log (occurences / sum all) """

    def __init__(self, corpus: typing.Iterable[typing.Tuple[str, int]], name: str = '') -> None:

        self._size = 0
        self._name = name

        raw_frequency_table: typing.Dict[str, int] = collections.defaultdict(int)
        for num_entry, (n_gram_read, frequency) in enumerate(corpus):
            n_gram = n_gram_read.lower()
            if not n_gram or [ll for ll in n_gram if ll not in ALPHABET]:
                raise ParseError(f"Bad n_gram '{n_gram_read}'", name or None, num_entry + 1)
            if self._size:
                if len(n_gram) != self._size:
                    raise ParseError(f"N-Gram '{n_gram_read}' has size {len(n_gram)} expected {self._size}", name or None, num_entry + 1)
            else:
                self._size = len(n_gram)
            if frequency <= 0:
                raise ParseError(f"Count for '{n_gram_read}' must be positive", name or None, num_entry + 1)
            if n_gram in raw_frequency_table:
                print(f"WARNING: duplicated n_gram '{n_gram}', occurences are added")
            raw_frequency_table[n_gram] += frequency

        if not raw_frequency_table:
            raise ParseError("No n_gram at all", name or None)

        print(f"INFORMATION: Using N-Grams with N={self._size}")

        coverage = (len(raw_frequency_table) / (len(ALPHABET) ** self._size)) * 100
        print(f"INFORMATION: Frequency tables covers {coverage:.2f}% of possibilities")

        self._total = sum(raw_frequency_table.values())

        # for normal values
        self._log_freq_table = {q: math.log10(raw_frequency_table[q] / self._total) for q in raw_frequency_table}

        # for missing values
        self._floor = math.log10(FLOOR_OCCURENCES / self._total)

    def score(self, text: str) -> float:
        """ Sum of log frequencies of all n_grams of the text (the higher the better) """

        plain = text.lower()
        size = self._size
        table = self._log_freq_table
        floor = self._floor
        return sum(table.get(plain[position: position + size], floor) for position in range(len(plain) - size + 1))

    @property
    def size(self) -> int:
        """ property """
        return self._size

    @property
    def name(self) -> str:
        """ property """
        return self._name

    @property
    def total(self) -> int:
        """ property """
        return self._total

    @property
    def floor(self) -> float:
        """ property """
        return self._floor

    @property
    def log_freq_table(self) -> typing.Dict[str, float]:
        """ property """
        return self._log_freq_table

    def __contains__(self, n_gram: object) -> bool:
        return isinstance(n_gram, str) and n_gram.lower() in self._log_freq_table

    def __len__(self) -> int:
        return len(self._log_freq_table)

    def __str__(self) -> str:
        """ for debug """
        return pprint.pformat(self._log_freq_table)


def load_ngrams(filename: str) -> Ngrams:
    """ Loads a n_gram frequency file """

    before = time.time()

    corpus = read_corpus(filename)
    ngrams = Ngrams(corpus, os.path.abspath(filename))

    after = time.time()
    elapsed = after - before
    print(f"INFORMATION: N-Gram frequency file '{filename}' loaded in {elapsed:2.2f} seconds")

    return ngrams


def main() -> None:
    """ main : scores texts given on command line """

    parser = argparse.ArgumentParser()
    parser.add_argument('-n', '--ngrams', required=True, help='input a file with frequency table for n_grams (n-letters)')
    parser.add_argument('texts', nargs='+', help='texts to score')
    args = parser.parse_args()

    try:
        ngrams = load_ngrams(args.ngrams)
    except DataError as exception:
        print(f"ERROR: {exception}")
        sys.exit(1)

    for text in args.texts:
        print(f"{text} = {ngrams.score(text):f}")


if __name__ == '__main__':
    main()
