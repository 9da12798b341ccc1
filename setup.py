# ruff: noqa
import os
from importlib.machinery import SourceFileLoader

from setuptools import find_packages, setup


__version__ = (
    SourceFileLoader("exfs.version", os.path.join("exfs", "version.py"))
    .load_module()
    .__version__
)


def read(fname):
    return open(os.path.join(os.path.dirname(__file__), fname)).read()


setup(
    name="exfs",
    version=__version__,
    python_requires=">=3.8,<3.13",
    install_requires=[
        "pyhumps==1.6.1",
        "requests",
        "furl",
        "boto3",
        "pandas",
        "numpy",
        "pyarrow>=10.0",
        "polars",
        "sqlalchemy",
        "PyMySQL[rsa]",
        "confluent-kafka",
        "fastavro>=1.4.11",
        "pytz",
        "tqdm",
        "rich",
    ],
    extras_require={
        "dev": [
            "pytest",
            "pytest-mock",
            "typeguard",
            "ruff",
            "moto[s3]",
        ],
    },
    author="Hopsworks AB",
    description="EXFS: A client to manage external feature groups of a feature store",
    license="Apache License 2.0",
    keywords="Feature Store, External Feature Group, Machine Learning, MLOps, DataOps",
    packages=find_packages(exclude=["tests*"]),
    long_description=read("README.md"),
    long_description_content_type="text/markdown",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Topic :: Utilities",
        "License :: OSI Approved :: Apache Software License",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Intended Audience :: Developers",
    ],
)
