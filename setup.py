# setup.py
from setuptools import setup, find_packages

setup(
    name="doc_scout",
    version="0.1.0",
    description="Асинхронный обходчик документации DocScout: HTML/Markdown/JSON в текст и чанки",
    packages=find_packages(exclude=("tests", "tests.*")),
    package_data={"doc_scout.report": ["templates/*.j2"]},
    include_package_data=True,
    install_requires=[
        "aiohttp>=3.9",
        "beautifulsoup4>=4.12",
        "lxml>=4.9",
        "pydantic>=2.5",
        "PyYAML>=6.0",
        "click>=8.1",
        "Jinja2>=3.1",
        "markdownify>=0.13",
        "playwright>=1.40",
        "langchain-text-splitters>=0.2",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": [
            "doc-scout=doc_scout.cli:cli",
        ],
    },
    python_requires=">=3.11",
)
