from setuptools import setup, find_packages

with open("requirements.txt") as f:
    required = f.read().splitlines()

setup(
    name="wowcig",
    version="0.0.1",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=required,
    extras_require={"test": ["pytest"]},
    entry_points={"console_scripts": ["wowcig = wowcig.cli:main"]},
    description="WoW interface file and db2 extractor",
)
