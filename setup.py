from setuptools import setup, find_packages

setup(
    name="consoletrace",
    version="1.0.0",
    author="consoletrace contributors",
    description="Boxed, verbosity aware exception traces for console applications",
    long_description=open("README.md", encoding="UTF-8").read(),
    long_description_content_type="text/markdown",
    packages=find_packages(include=["consoletrace", "consoletrace.*"]),
    python_requires=">=3.9",
    classifiers = [
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    install_requires = ["html5tagger>=1.2.1"],
    extras_require = {
        "test": ["pytest", "coverage", "beautifulsoup4"],
    },
    include_package_data = True,
)
