# -*- coding: utf-8 -*-
"""
Setup Script for Priority_Pruner
"""
import os
import codecs

from setuptools import setup

###############################################################################
#                     Build the things we need for setup                      #
###############################################################################

# Get the long description from the README file
here = os.path.abspath(os.path.dirname(__file__))
with codecs.open(os.path.join(here, 'README.rst'), encoding='utf-8') as f:
    long_description = f.read()

###############################################################################
#                                Setup Options                                #
###############################################################################

setup(
    name='Priority_Pruner',
    version='0.1.0',
    description=('Prune prioritized SNP lists by linkage disequilibrium'),
    long_description=long_description,
    license='MIT',

    # See https://pypi.python.org/pypi?%3Aaction=list_classifiers
    classifiers=[
        'Development Status :: 3 - Alpha',
        'Intended Audience :: Science/Research',
        'Topic :: Scientific/Engineering :: Bio-Informatics',
        'Environment :: Console',
        'Operating System :: POSIX :: Linux',
        'Natural Language :: English',
        'License :: OSI Approved :: MIT License',
        'Programming Language :: Python :: 3',
    ],

    keywords='linkage-disequilibrium LD SNP tagging pruning',

    python_requires='>=3.6',
    install_requires=['numpy', 'pandas', 'tqdm'],
    extras_require={'test': ['pytest']},
    packages=['Priority_Pruner'],
    entry_points={
        'console_scripts': [
            'priority_pruner=Priority_Pruner.prune_snps:main',
        ],
    },
)
