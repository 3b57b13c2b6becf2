#!/usr/bin/env python3
from setuptools import setup, find_packages

setup(
    name='xi-spellcheck',
    version='0.1',
    description='Incremental spellcheck engine and xi-editor plugin.',
    url='https://github.com/google/xi-editor',
    author='The Xi Editor Authors',
    license='Apache',
    package_dir={'': 'python'},
    packages=find_packages('python', exclude=['tests']),
    py_modules=['spellcheck'],
    python_requires='>=3.6',
    install_requires=[
        'pyenchant',
        'symspellpy',
    ],
    extras_require={
        'test': ['pytest'],
    },
    tests_require=['pytest'],
    entry_points={
        'console_scripts': ['xi-spellcheck=spellcheck:main'],
    },
    zip_safe=False,
)
