#!/usr/bin/env python3


"""
Decodes a 'substitution' cipher.
This is a cipher where :
  - there is a strict correspondance one letter cipher / one letter plain
  - the separation between words may or may not be shown (anything not a letter is left as is)
The method implemented here :
  1) frequency analysis gives a first key (most frequent cipher letter is 'e' and so on)
  2) the key is improved using bigrams by swapping letters next to each other in standard frequency order
  3) the key is improved using quadgrams by swapping letters at random (hill climb), starting
     back from the key of step 2 when stuck and too few words are recognized
"""

import os
import sys
import time
import argparse
import collections
import contextlib
import random
import typing

import cProfile
import pstats

import ngrams

PROFILE = False
VERBOSE = False

ALPHABET = [chr(i) for i in range(ord('a'), ord('z') + 1)]  # plain always lower case

# letters by use in English : 'e' used most, 'j' used least
STANDARD_ORDER = tuple(ALPHABET.index(ll) for ll in 'etaosnihrldwumgfcypbzxvqkj')

# the most common words in English (removing those of less than three letters)
COMMON_WORDS = (
    "the", "and", "that", "have", "for", "not", "with", "you", "this", "but", "his", "from", "they",
    "say", "her", "she", "will", "one", "all", "would", "there", "their", "what", "out", "about", "who", "get", "which", "when",
    "make", "can", "like", "time", "just", "him", "know", "take", "people", "into", "year", "your", "good", "some", "could",
    "them", "see", "other", "than", "then", "now", "look", "only", "come", "its", "over", "think", "also", "back", "after",
    "use", "two", "how", "our", "work", "first", "well", "way", "even", "new", "want", "because", "any", "these", "give",
    "day", "most")

# passes of refinement with bigrams
PASSES = 10

# random climb gives up after so many swaps without improvement
MAX_NO_CHANGE = 10000

# starts back from refined key when that close to giving up...
DO_OVER_MARGIN = 10

# ...but not more than that
MAX_DO_OVERS = 1000

# ...and only if less than one word recognized per so many letters of cipher
WORDS_RATIO = 14


class LetterCount(typing.NamedTuple):
    """ A letter and how many times it is used in cipher """

    letter: str
    count: int


class Candidate(typing.NamedTuple):
    """ A key tried and what it gives """

    mapping: typing.List[int]
    plain: str
    quadgram_quality: float
    bigram_quality: float
    word_count: int


def check_mapping(mapping: typing.Sequence[int]) -> None:
    """ A mapping must be a permutation of the alphabet """
    assert sorted(mapping) == list(range(len(ALPHABET))), f"Mapping {list(mapping)} is not a permutation of the alphabet"


def substitute(text: str, mapping: typing.Sequence[int]) -> str:
    """
    Substitutes the lower case letters of text according to the mapping.
    Deciphers with the mapping or enciphers with its inverse.
    Anything else (upper case, digits, punctuation...) is left as is.
    """
    table = str.maketrans(''.join(ALPHABET), ''.join(ALPHABET[p] for p in mapping))
    return text.translate(table)


def invert(mapping: typing.Sequence[int]) -> typing.List[int]:
    """ the mapping the other way round """

    inverse = [0] * len(ALPHABET)
    for cipher, plain in enumerate(mapping):
        inverse[plain] = cipher
    return inverse


def mapping_to_key(mapping: typing.Sequence[int]) -> str:
    """ key as a string : plain letter for cipher letters 'a' to 'z' """
    return ''.join(ALPHABET[p] for p in mapping)


def key_to_mapping(key: str) -> typing.List[int]:
    """ reverse of mapping_to_key """

    key = key.strip().lower()
    assert len(key) == len(ALPHABET) and not [ll for ll in key if ll not in ALPHABET], f"Bad key '{key}'"
    mapping = [ALPHABET.index(ll) for ll in key]
    check_mapping(mapping)
    return mapping


def key_in_standard_order(mapping: typing.Sequence[int]) -> str:
    """ cipher-plain pairs for all letters, plain in standard frequency order (e,t,a,o...) """

    inverse = invert(mapping)
    return ','.join(f"{ALPHABET[inverse[p]]}-{ALPHABET[p]}" for p in STANDARD_ORDER)


def print_key(mapping: typing.Sequence[int], file_handle: typing.TextIO) -> None:
    """ print_key """

    inverse = invert(mapping)
    with contextlib.redirect_stdout(file_handle):
        print("-" * len(ALPHABET))
        print(''.join(ALPHABET))
        print(''.join(ALPHABET[c].upper() for c in inverse))
        print("-" * len(ALPHABET))
        print(f"map is {key_in_standard_order(mapping)}")


def count_words(plain: str) -> int:
    """ How many common words can be found in (supposedly) plain text """
    return sum(plain.count(w) for w in COMMON_WORDS)


def letter_counts(cipher: str) -> typing.List[LetterCount]:
    """ How many times each letter of the alphabet is used in cipher (case ignored) """

    counter = collections.Counter(ll for ll in cipher.lower() if ll in ALPHABET)
    return [LetterCount(ll, counter[ll]) for ll in ALPHABET]


def frequency_analysis(cipher: str) -> typing.List[int]:
    """
    First key : the most frequent letter in cipher is mapped to the most frequent letter
    in English ('e'), the next one to 't' and so on.
    Letters used as many times are taken in alphabetical order.
    """

    ranking = sorted(letter_counts(cipher), key=lambda lc: (-lc.count, lc.letter))

    mapping = [0] * len(ALPHABET)
    for rank, letter_count in enumerate(ranking):
        mapping[ALPHABET.index(letter_count.letter)] = STANDARD_ORDER[rank]

    check_mapping(mapping)
    return mapping


class Refiner:
    """ Improves a key using bigrams, swapping letters next to each other in standard frequency order (bubble sort style) """

    def __init__(self, cipher: str, bigrams: ngrams.Ngrams, passes: int = PASSES) -> None:

        self._cipher = cipher
        self._bigrams = bigrams
        self._passes = passes

        self._best_score = 0.
        self._best_plain = ''
        self._improvements = 0

        # best score after each try
        self._trace: typing.List[float] = list()

    def refine(self, mapping: typing.List[int]) -> typing.List[int]:
        """ Refines the mapping (in place) and returns it """

        check_mapping(mapping)

        self._best_plain = substitute(self._cipher, mapping)
        self._best_score = self._bigrams.score(self._best_plain)
        self._improvements = 0
        self._trace.clear()

        for _ in range(self._passes):
            for rank in range(len(STANDARD_ORDER) - 1):

                # where the two plain letters are in the mapping
                slot1 = mapping.index(STANDARD_ORDER[rank])
                slot2 = mapping.index(STANDARD_ORDER[rank + 1])

                # swap them
                mapping[slot1], mapping[slot2] = mapping[slot2], mapping[slot1]

                plain = substitute(self._cipher, mapping)
                score = self._bigrams.score(plain)

                if score > self._best_score:
                    self._best_score = score
                    self._best_plain = plain
                    self._improvements += 1
                else:
                    # not as good so put them back
                    mapping[slot1], mapping[slot2] = mapping[slot2], mapping[slot1]

                self._trace.append(self._best_score)

        return mapping

    @property
    def best_score(self) -> float:
        """ property """
        return self._best_score

    @property
    def best_plain(self) -> str:
        """ property """
        return self._best_plain

    @property
    def improvements(self) -> int:
        """ property """
        return self._improvements

    @property
    def trace(self) -> typing.List[float]:
        """ property """
        return self._trace


class Attacker:
    """ Attacker : random hill climb with quadgrams, starting back from seed key when stuck """

    def __init__(self, cipher: str, bigrams: ngrams.Ngrams, quadgrams: ngrams.Ngrams, rng: random.Random,
                 max_no_change: int = MAX_NO_CHANGE, do_over_margin: int = DO_OVER_MARGIN,
                 max_do_overs: int = MAX_DO_OVERS, words_ratio: int = WORDS_RATIO) -> None:

        assert 0 <= do_over_margin < max_no_change, "Do over margin must be less than the patience"
        assert max_do_overs > 0, "Need at least one do over allowed"
        assert words_ratio > 0, "Words ratio must be positive"

        self._cipher = cipher
        self._bigrams = bigrams
        self._quadgrams = quadgrams
        self._rng = rng

        self._max_no_change = max_no_change
        self._do_over_margin = do_over_margin
        self._max_do_overs = max_do_overs

        # number of words to get from the cipher : too high runs forever, too low will not make sense
        self._words_target = len(cipher) // words_ratio

        self._num_do_overs = 0

        # to measure speed
        self._n_operations = 0

        # (do over number, quality) each time the best changes
        self._trace: typing.List[typing.Tuple[int, float]] = list()

    def evaluate(self, mapping: typing.List[int]) -> Candidate:
        """ Deciphers and evaluates with this mapping """

        plain = substitute(self._cipher, mapping)
        return Candidate(mapping, plain, self._quadgrams.score(plain), self._bigrams.score(plain), count_words(plain))

    def _random_swap(self, mapping: typing.List[int]) -> typing.List[int]:
        """ a copy of the mapping with two positions picked at random swapped """

        position1 = self._rng.randrange(len(ALPHABET))
        position2 = self._rng.randrange(len(ALPHABET))
        while position2 == position1:
            position2 = self._rng.randrange(len(ALPHABET))

        tried = list(mapping)
        tried[position1], tried[position2] = tried[position2], tried[position1]
        return tried

    def climb(self, seed: typing.Sequence[int]) -> typing.Tuple[Candidate, int]:
        """ climb : returns best candidate and best word count seen """

        check_mapping(seed)
        seed = list(seed)

        best = self.evaluate(list(seed))
        best_word_count = best.word_count
        num_no_change = 0

        self._num_do_overs = 0
        self._trace = [(0, best.quadgram_quality)]

        while num_no_change < self._max_no_change and self._num_do_overs < self._max_do_overs:

            # close to giving up and still too few words : start back from the seed
            if num_no_change > self._max_no_change - self._do_over_margin and best_word_count < self._words_target:
                print(f"INFORMATION: Do over from '{best.plain[:50]}' words={best_word_count}<{self._words_target} map is {key_in_standard_order(best.mapping)}")
                best = self.evaluate(list(seed))
                best_word_count = best.word_count
                num_no_change = 0
                self._num_do_overs += 1
                self._trace.append((self._num_do_overs, best.quadgram_quality))

            candidate = self.evaluate(self._random_swap(best.mapping))
            self._n_operations += 1

            # only for information
            if candidate.word_count > best_word_count:
                best_word_count = candidate.word_count

            if candidate.quadgram_quality > best.quadgram_quality:
                best = candidate
                num_no_change = 0
                self._trace.append((self._num_do_overs, best.quadgram_quality))
                if VERBOSE:
                    print("/", end='', flush=True)
            else:
                num_no_change += 1

        if VERBOSE:
            print()

        return best, best_word_count

    @property
    def words_target(self) -> int:
        """ property """
        return self._words_target

    @property
    def num_do_overs(self) -> int:
        """ property """
        return self._num_do_overs

    @property
    def n_operations(self) -> int:
        """ property """
        return self._n_operations

    @property
    def trace(self) -> typing.List[typing.Tuple[int, float]]:
        """ property """
        return self._trace


class Solution:
    """ A solution """

    def __init__(self, best: Candidate, word_count: int, time_taken: float, num_do_overs: int, n_operations: int) -> None:

        self._mapping = list(best.mapping)
        self._plain = best.plain
        self._quality = best.quadgram_quality
        self._word_count = word_count
        self._time_taken = time_taken
        self._num_do_overs = num_do_overs
        self._n_operations = n_operations

    def print_solution(self, file_handle: typing.TextIO) -> None:
        """ print_solution """

        print("=" * 50, file=file_handle)
        print(self._plain, file=file_handle)
        print("=" * 50, file=file_handle)
        print(f"quality={self._quality}", file=file_handle)
        print(f"best word count={self._word_count}", file=file_handle)
        print(f"do overs={self._num_do_overs}", file=file_handle)
        print(f"swaps tried={self._n_operations}", file=file_handle)
        print(f"time taken={self._time_taken:f} sec.", file=file_handle)
        print_key(self._mapping, file_handle)

    @property
    def mapping(self) -> typing.List[int]:
        """ property """
        return self._mapping

    @property
    def plain(self) -> str:
        """ property """
        return self._plain

    @property
    def quality(self) -> float:
        """ property """
        return self._quality

    @property
    def word_count(self) -> int:
        """ property """
        return self._word_count

    @property
    def time_taken(self) -> float:
        """ property """
        return self._time_taken

    @property
    def num_do_overs(self) -> int:
        """ property """
        return self._num_do_overs

    @property
    def n_operations(self) -> int:
        """ property """
        return self._n_operations


def solve(cipher: str, bigrams: ngrams.Ngrams, quadgrams: ngrams.Ngrams, rng: typing.Optional[random.Random] = None,
          passes: int = PASSES, **search_options: int) -> Solution:
    """ Solver : frequency analysis, then refinement with bigrams, then random climb with quadgrams """

    start = time.time()

    if rng is None:
        rng = random.Random()

    cipher = cipher.lower()

    first_key = frequency_analysis(cipher)
    print(f"INFORMATION: Frequency analysis map is {key_in_standard_order(first_key)}")

    refiner = Refiner(cipher, bigrams, passes)
    refiner.refine(first_key)
    print(f"INFORMATION: Refined with {refiner.improvements} improvements map is {key_in_standard_order(first_key)}")

    attacker = Attacker(cipher, bigrams, quadgrams, rng, **search_options)
    best, word_count = attacker.climb(list(first_key))

    elapsed = time.time() - start
    return Solution(best, word_count, elapsed, attacker.num_do_overs, attacker.n_operations)


def load_cipher(filename: str) -> str:
    """ Reads cipher from file (lines joined, case lowered) """

    full_path = os.path.abspath(filename)
    try:
        with open(full_path) as filepointer:
            content = ''.join(line.rstrip('\n') for line in filepointer)
    except OSError as exception:
        raise ngrams.DataError(f"Cannot read cipher file {full_path} : {exception}", full_path) from exception

    return content.lower()


def main() -> None:
    """ main """

    parser = argparse.ArgumentParser()
    parser.add_argument('-b', '--bigrams', required=True, help='input a file with frequency table for bigrams (2-letters)')
    parser.add_argument('-q', '--quadgrams', required=True, help='input a file with frequency table for quadgrams (4-letters)')
    parser.add_argument('-c', '--cipher', required=True, help='cipher to attack')
    parser.add_argument('-s', '--seed', required=False, help='seed for random generator (to reproduce a run)')
    parser.add_argument('-p', '--passes', required=False, help='passes of refinement with bigrams')
    parser.add_argument('-n', '--max_no_change', required=False, help='swaps without improvement before giving up')
    parser.add_argument('-d', '--max_do_overs', required=False, help='maximum times to start back from refined key')
    parser.add_argument('-o', '--output_solution', required=False, help='file where to output solution')
    args = parser.parse_args()

    try:
        bigrams = ngrams.load_ngrams(args.bigrams)
        quadgrams = ngrams.load_ngrams(args.quadgrams)
        cipher = load_cipher(args.cipher)
    except ngrams.DataError as exception:
        print(f"ERROR: {exception}")
        sys.exit(1)

    if bigrams.size != 2:
        print(f"WARNING: bigrams file has N={bigrams.size}")
    if quadgrams.size != 4:
        print(f"WARNING: quadgrams file has N={quadgrams.size}")

    print(f"INFORMATION: We have a cipher with {len(set(ll for ll in cipher if ll in ALPHABET))} different letters and a length of {len(cipher)}")

    rng = random.Random(int(args.seed)) if args.seed is not None else random.Random()
    passes = int(args.passes) if args.passes is not None else PASSES

    search_options: typing.Dict[str, int] = dict()
    if args.max_no_change is not None:
        search_options['max_no_change'] = int(args.max_no_change)
    if args.max_do_overs is not None:
        search_options['max_do_overs'] = int(args.max_do_overs)

    solution = solve(cipher, bigrams, quadgrams, rng, passes, **search_options)
    solution.print_solution(sys.stdout)

    output_solution_file = args.output_solution
    if output_solution_file is not None:
        with open(output_solution_file, 'w') as file_handle:
            solution.print_solution(file_handle)


if __name__ == '__main__':

    # this if script too slow and profile it
    if PROFILE:
        PR = cProfile.Profile()
        PR.enable()

    # this to know how long it takes
    START = time.time()

    try:
        main()
    except KeyboardInterrupt:
        print("Ctrl+C detected !")

    END = time.time()
    ELAPSED = END - START
    #  how long it took
    print(f"Time taken is {ELAPSED:2.2f}sec.")

    # stats
    if PROFILE:
        PR.disable()
        PS = pstats.Stats(PR)
        PS.strip_dirs()
        PS.sort_stats('time')
        PS.print_stats()

    sys.exit(0)
