from setuptools import setup, find_packages

with open("README.md", "r") as f:
    long_description = f.read()

setup(
    name="pubsuffix",
    version="1.0.0",
    author="Dominick C. Pastore",
    author_email="pubsuffix@dcpx.org",
    description="Public suffix and organizational domain lookup",
    long_description=long_description,
    long_description_content_type="text/markdown",
    license="GPL-3.0-or-later",
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: GNU General Public License v3 or later "
        "(GPLv3+)",
        "Topic :: Internet :: Name Service (DNS)",
    ],

    package_dir={"": "src"},
    packages=find_packages(where="src"),
    package_data={
        "pubsuffix": ["data/*"],
    },
    install_requires=[
        "requests",
        "importlib_metadata; python_version<'3.10'",
    ],
    python_requires=">=3.8",
    extras_require={
        "docs": ["sphinx"],
        "test": [
            "flake8",
            "pytest",
            "pytest-cov",
            "pytest-mock",
        ]
    },

    entry_points={
        "console_scripts": [
            "pubsuffix=pubsuffix.main:main",
        ],
    },
)
