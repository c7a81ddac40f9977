#!/usr/bin/env python3
import re
import sys

line = sys.stdin.readline()
if not re.fullmatch(r'-?[0-9]+ -?[0-9]+\n', line):
    sys.exit('expected two integers on one line')
a, b = map(int, line.split())
if not (abs(a) <= 10**9 and abs(b) <= 10**9):
    sys.exit('integer out of range')
if sys.stdin.read():
    sys.exit('trailing data')
