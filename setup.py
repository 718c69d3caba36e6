#!/usr/bin/env python3
"""
Setup script for Folio - portfolio content pipeline and static site builder.
"""

from setuptools import setup, find_packages
import os

# Read the contents of README file
this_directory = os.path.abspath(os.path.dirname(__file__))
with open(os.path.join(this_directory, 'README.md'), encoding='utf-8') as f:
    long_description = f.read()

setup(
    name='folio',
    version='1.0.0',
    description='Content pipeline, asset localizer and static renderer for a personal portfolio site',
    long_description=long_description,
    long_description_content_type='text/markdown',
    packages=find_packages(exclude=['tests', 'tests.*']),
    package_data={
        'folio_pkg': [
            'templates/*.html',
            'static/css/*.css',
        ],
    },
    include_package_data=True,
    classifiers=[
        'Development Status :: 4 - Beta',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: MIT License',
        'Operating System :: OS Independent',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.9',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
        'Topic :: Internet :: WWW/HTTP :: Site Management',
        'Topic :: Text Processing :: Markup :: HTML',
    ],
    python_requires='>=3.9',
    install_requires=[
        'PyYAML>=6.0',
        'requests>=2.28',
        'Jinja2>=3.0',
        'mistune>=3.0',
        'Pillow>=9.0',
        'csscompressor>=0.9.5',
        'tqdm>=4.60',
        'pykakasi>=2.2',
    ],
    extras_require={
        'test': [
            'pytest>=7.0',
            'pytest-cov>=4.0',
        ],
    },
    entry_points={
        'console_scripts': [
            'folio=folio_pkg.cli:main',
            'folio-localize-assets=folio_pkg.cli:localize_assets_main',
            'folio-migrate-ids=folio_pkg.cli:migrate_ids_main',
        ],
    },
    keywords='portfolio, static site generator, yaml, microcms, jinja2',
)
