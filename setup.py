"""Setup script for Equation Colors"""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="equation-colors",
    version="0.1.0",
    author="Equation Colors Team",
    description="Colored-term editing engine for LaTeX equations",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Topic :: Scientific/Engineering :: Mathematics",
        "Topic :: Text Processing :: Markup :: LaTeX",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
    ],
    python_requires=">=3.8",
    install_requires=[
        "Pillow>=8.0.0",
        "pyyaml>=5.4.0",
        "regex>=2021.8.0",
    ],
    extras_require={
        "rendering": ["pdf2image>=1.16.0", "Wand>=0.6.0"],
        "dev": ["pytest>=6.0.0", "pytest-cov>=2.10.0", "black>=21.0", "flake8>=3.9.0"],
    },
)
