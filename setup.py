from setuptools import setup, find_packages

setup(
    name="tokenledger",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "numpy",
        "pydantic>=2",
        "pydantic-settings>=2",
    ],
    extras_require={
        "dev": [
            "pytest",
            "pytest-cov",
        ],
    },
)
