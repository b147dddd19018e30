#!/usr/bin/env python
from setuptools import setup

with open("README.md", "r") as fh:
    long_description = fh.read()

setup(name='gcal',
      version='1.0.0',
      maintainer='The gcal authors',
      description='Google Calendar Command Line Interface',
      long_description=long_description,
      long_description_content_type="text/markdown",
      packages=['gcal', 'gcal.google_backend', 'gcal.file_backend'],
      install_requires=[
          'python-dateutil',
          'parsedatetime',
          'icalendar',
          'requests',
          'google-auth',
          'google-auth-oauthlib',
          'tzlocal',
      ],
      extras_require={
          'test': ["pytest"],
      },
      entry_points={
          'console_scripts':
              ['gcal=gcal.gcal:main'],
      },
      classifiers=[
          "Development Status :: 3 - Alpha",
          "Environment :: Console",
          "Intended Audience :: End Users/Desktop",
          "License :: OSI Approved :: MIT License",
          "Programming Language :: Python :: 3",
      ],
      python_requires='>=3.8',
)  # noqa E124
