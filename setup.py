from pathlib import Path

from setuptools import setup, find_packages

about = {}
exec(Path("marketlens/__version__.py").read_text(encoding="utf-8"), about)

setup(
    name="marketlens",
    version=about["__version__"],
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={
        "marketlens.localization": ["catalogs/*.yaml"],
    },
    include_package_data=True,
    install_requires=[
        "reportlab>=4.0",
        "matplotlib>=3.7",
        "pyyaml>=6.0",
        "requests>=2.31",
        "pillow>=10.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.4",
        ],
    },
    entry_points={
        "console_scripts": [
            "marketlens=marketlens.cli:main",
        ],
    },
    python_requires=">=3.9",
    description="Marketing report composition and rendering engine (Markdown + PDF)",
    long_description=Path("README.md").read_text(encoding="utf-8"),
    long_description_content_type="text/markdown",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ]
)
