from setuptools import setup, find_packages
import re

# Read version from ukpay/__init__.py
with open('ukpay/__init__.py') as f:
    version = re.search(r'^__version__ = ["\']([^"\']+)["\']', f.read(), re.MULTILINE).group(1)

setup(
    name='uk-pay-calc',
    version=version,
    packages=find_packages(exclude=['tests', 'tests.*']),
    package_data={
        'ukpay.sdk.taxes': ['tables/*.yaml'],
    },
    install_requires=[
        'PyYAML>=6.0',
        'click>=8.0',
        'pydantic>=2.0.0',
        'rich>=13.0',
    ],
    extras_require={
        'test': [
            'pytest>=7.0',
        ],
    },
    entry_points={
        'console_scripts': [
            'uk-pay=ukpay.cli.__main__:main',
        ],
    },
    author='Personal',
    description='UK weekly pay, income tax and National Insurance calculator.',
    python_requires='>=3.10',
)
