from setuptools import setup, find_packages

setup(
    name="adcpcast",
    version="0.1.0",
    description="A package for regularizing and aggregating shipboard ADCP cast profiles.",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    keywords=["ADCP", "oceanography"],
    python_requires=">=3.11",
    install_requires=[
        "polars>=1.1.0",
        "pandas>=2.2.2",
        "pyarrow>=17.0.0",
        "numpy>=1.26.4",
        "scipy>=1.11",
        "gsw>=3.6.18",
        "colorlog>=6.8.2",
        "rich>=13.7",
        "rich-argparse>=1.5",
    ],
    extras_require={
        "test": ["pytest>=8.0"],
    },
    packages=find_packages(".", exclude=["tests", "tests.*"]),
    entry_points={
        "console_scripts": [
            "adcpcast-cli=adcpcast.cli.cli:main",
        ],
    },
)
