#!/usr/bin/env python3
# Usage: checker.py <input> <output> <answer>; accepts surrounding whitespace.
import sys

with open(sys.argv[2]) as output, open(sys.argv[3]) as answer:
    sys.exit(output.read().split() != answer.read().split())
