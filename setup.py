#!/usr/bin/env python3
from setuptools import setup
import subprocess
import os


def version():
    ver = os.environ.get("PKGVER")
    if ver:
        return ver
    try:
        ver = subprocess.run(['git', 'describe', '--tags'],
                             stdout=subprocess.PIPE, stderr=subprocess.DEVNULL).stdout.decode().strip()
    except FileNotFoundError:
        ver = ""
    return ver or "0.1.0"


reqs = []
with open('requirements.txt') as f:
    for l in f:
        l = l.strip()
        if not l:
            continue
        if l.find("=") != -1 and l.find("==") == -1 and l.find(">=") == -1:
            s = l.split("=", 1)
            reqs.append("{} @ {}".format(s[1], s[0]))
        else:
            reqs.append(l)

setup(
    name = 'music-api',
    packages = [
        'music',
        'music.types',
        ],
    version = version(),
    description = 'REST API for songs and artists',
    install_requires = reqs,
    extras_require = {
        'test': ['pytest'],
    },
    python_requires = '>=3.9',
    license = 'MIT',
)
