from pathlib import Path

from setuptools import setup, find_packages

README = Path(__file__).parent / "README.md"

setup(
    name="jobapp-client",
    version="0.1.0",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    install_requires=[
        "pydantic>=2.0",
        "pydantic-settings>=2.0",
        "python-dotenv>=0.19.0",
        "requests>=2.26.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "pytest-asyncio>=0.21",
        ],
    },
    python_requires=">=3.9",
    author="Christo Strydom",
    author_email="christo.strydom@gmail.com",
    description="Client library for the job marketplace application lifecycle",
    long_description=README.read_text() if README.exists() else "",
    long_description_content_type="text/markdown",
)
