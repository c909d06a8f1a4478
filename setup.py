from setuptools import find_packages, setup

setup(
    name="pushpipe",
    version="0.1.0",
    description="Lazily evaluated, push-based data-processing pipelines over in-memory sequences",
    long_description=open("README.md", encoding="utf-8").read(),
    long_description_content_type="text/markdown",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    python_requires=">=3.11",
    install_requires=[
        "pydantic>=2.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
)
