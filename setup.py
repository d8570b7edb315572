"""Setup configuration for connstring"""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="connstring",
    version="1.0.0",
    author="SuiteView",
    description="Parse, encrypt and rebuild database connection strings",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.10",
    install_requires=[
        "sqlalchemy>=2.0.23",
        "cryptography>=41.0.7",
    ],
    extras_require={
        "test": [
            "pytest>=7.4.3",
        ],
        "dev": [
            "pytest>=7.4.3",
            "black>=23.12.1",
            "flake8>=6.1.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "connstring=connstring.main:main",
        ],
    },
)
