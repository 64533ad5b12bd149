from pathlib import Path
from setuptools import setup, find_packages

requirements = Path(__file__).with_name("requirements.txt").read_text().splitlines()

setup(
    name="movr",
    version="0.1.0",
    description="Stay-session compression, location flows and radius of gyration for movement traces",
    author="movr developers",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    install_requires=requirements,
    extras_require={"test": ["pytest>=7"]},
    entry_points={"console_scripts": ["movr=movr.cli:main"]},
    python_requires=">=3.10",
    classifiers=[
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
)
