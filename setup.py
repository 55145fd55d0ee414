"""Setup configuration for pdi-intake."""

from setuptools import find_packages, setup

setup(
    name="pdi-intake",
    version="0.1.0",
    packages=find_packages(include=["pdi_intake", "pdi_intake.*"]),
    package_dir={"": "."},
    python_requires=">=3.8",
    install_requires=[
        "boto3>=1.35.10",
        "botocore>=1.35.10",
        "requests>=2.31",
        "click>=8.1",
        "PyYAML>=6.0",
        "python-dotenv>=1.0",
    ],
    extras_require={"test": ["pytest>=7.4"]},
)
