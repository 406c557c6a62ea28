from pathlib import Path

from setuptools import setup, find_packages

# The directory containing this file
here = Path(__file__).parent

# The text of the README file
README = (here / "README.md").read_text()

requirements = (here / "requirements/base.in").read_text().splitlines()

setup(
    name='academy-api',
    python_requires='>=3.10',
    version='0.1.0',
    description="Layered REST API template with a resilient multi-host HTTP client",
    long_description=README,
    long_description_content_type="text/markdown",
    license="MIT",
    classifiers=[
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
    ],
    package_dir={'': 'src'},
    packages=find_packages(where='src', include=[
        'academy',
        'academy.*'
    ]),
    install_requires=requirements,
    extras_require={
        'test': ['pytest', 'pytest-asyncio', 'httpx', 'trustme']
    },
    entry_points={
        'console_scripts': ['academy=academy.web.main:main']
    }
)
