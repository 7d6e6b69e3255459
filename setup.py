from setuptools import setup, find_packages

setup(
    name="stake-ledger",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    include_package_data=True,
    install_requires=[
        "PyYAML>=6.0.1",
        "loguru>=0.7.0",
        "pydantic>=2.0.0",
        "Click>=8.0"
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
        ]
    },
    entry_points={
        "console_scripts": [
            "stake-ledger=stake_ledger.main:cli",
        ],
    },
    python_requires=">=3.9",
    author="Stake Ledger Team",
    description="Staking ledger with block-based reward accrual and a local chain CLI",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
    ],
)
