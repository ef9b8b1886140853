#!/usr/bin/env python3

from setuptools import setup, find_packages
import os

# Read README file
readme_path = os.path.join(os.path.dirname(__file__), "README.md")
try:
    with open(readme_path, "r", encoding="utf-8") as fh:
        long_description = fh.read()
except FileNotFoundError:
    long_description = "A WebDAV gateway for flat blob stores"

requirements = [
    "Flask>=2.3.0",
    "Werkzeug>=2.3.0",
    "click>=8.1.0",
    "requests>=2.31.0",
    "waitress>=2.1.0",
    "boto3>=1.28.0",
]

test_requirements = [
    "pytest>=7.4.0",
    "requests-mock>=1.11.0",
]

setup(
    name="blobdav",
    version="1.0.0",
    description="A WebDAV gateway for flat blob stores (S3, R2, local disk)",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=['blobdav', 'blobdav.*']),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.9",
    install_requires=requirements,
    extras_require={
        "test": test_requirements,
    },
    entry_points={
        "console_scripts": [
            "blobdav=blobdav.cli:cli",
        ],
    },
    include_package_data=True,
    zip_safe=False,
)
