#!/usr/bin/env python3
# Two random integers; the seed is the only argument.
import random
import sys

rng = random.Random(int(sys.argv[1]))
print(rng.randint(-10**9, 10**9), rng.randint(-10**9, 10**9))
