#!/usr/bin/env python3


"""
Input : text (file with words)
Output : code (same text enciphered with a random substitution key)
"""

import sys
import typing
import argparse
import random
import unicodedata

import substitution


def make_random_mapping(rng: random.Random) -> typing.List[int]:
    """ A random key (as a mapping plain -> cipher) """

    mapping = list(range(len(substitution.ALPHABET)))
    rng.shuffle(mapping)
    return mapping


def normalize(text: str) -> str:
    """ Lower case, accents removed """

    nfkd_form = unicodedata.normalize('NFKD', text)
    only_ascii = nfkd_form.encode('ASCII', 'ignore')
    return only_ascii.decode().lower()


def encipher(text: str, mapping: typing.Sequence[int]) -> str:
    """ Enciphers text : mapping is plain -> cipher, deciphering uses its inverse """
    return substitution.substitute(normalize(text), mapping)


def main() -> None:
    """ main """

    parser = argparse.ArgumentParser()
    parser.add_argument('-i', '--input', required=True, help='input file with plain (can have accents - will be corrected)')
    parser.add_argument('-o', '--output', required=True, help='output a file with cipher')
    parser.add_argument('-s', '--seed', required=False, help='seed for random generator (to reproduce a key)')
    parser.add_argument('-K', '--key_dump', required=False, help='dump deciphering key to file')
    args = parser.parse_args()

    rng = random.Random(int(args.seed)) if args.seed is not None else random.Random()
    mapping = make_random_mapping(rng)

    try:
        with open(args.input, encoding='utf-8') as filepointer:
            plain = filepointer.read()
    except OSError as exception:
        print(f"ERROR: Cannot read '{args.input}' : {exception}")
        sys.exit(1)

    with open(args.output, 'w') as file_handle:
        print(encipher(plain, mapping).rstrip('\n'), file=file_handle)

    if args.key_dump:
        # what the solver should find
        decipher_mapping = substitution.invert(mapping)
        with open(args.key_dump, 'w') as file_handle:
            print(substitution.mapping_to_key(decipher_mapping), file=file_handle)
            substitution.print_key(decipher_mapping, file_handle)


if __name__ == '__main__':
    main()
