from setuptools import setup, find_packages
from pathlib import Path


def read_readme():
    this_directory = Path(__file__).parent
    readme_file = this_directory / 'README.md'
    if readme_file.exists():
        return readme_file.read_text(encoding='utf-8')
    return ""

def get_version():
    import re
    init_file = Path(__file__).parent / 'pgmq_client' / '__init__.py'
    if init_file.exists():
        content = init_file.read_text()
        match = re.search(r'__version__\s*=\s*["\']([^"\']+)["\']', content)
        if match:
            return match.group(1)
    return "0.3.0"


setup(
    name="pgmq-client",
    version=get_version(),
    description="Synchronous PostgreSQL Message Queue (PGMQ) client with connection pooling and transactions.",
    long_description=read_readme(),
    long_description_content_type='text/markdown',
    packages=find_packages(include=['pgmq_client', 'pgmq_client.*']),
    include_package_data=True,
    python_requires=">=3.11",
    install_requires=[
        "psycopg[binary]>=3.2.0",
        "psycopg-pool>=3.2.0",
        "pydantic>=2.7.0",
    ],
    extras_require={
        "msgpack": [
            "msgpack>=1.0.0",
        ],
        "test": [
            "pytest>=8.0.0",
            "msgpack>=1.0.0",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Software Development :: Libraries :: Python Modules",
        "Topic :: Database",
    ],
    keywords="postgres postgresql pgmq queue message-queue psycopg",
)
