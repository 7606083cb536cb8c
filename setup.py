from setuptools import setup, find_packages
import re

# Read version from sarspay/__init__.py
with open('sarspay/__init__.py') as f:
    version = re.search(r'^__version__ = ["\']([^"\']+)["\']', f.read(), re.MULTILINE).group(1)

setup(
    name='sars-pay',
    version=version,
    packages=find_packages(include=['sarspay', 'sarspay.*']),
    package_data={
        'sarspay': ['tax_rules/*.yaml'],
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
            'sars-pay=sarspay.cli.__main__:main',
        ],
    },
    author='Personal',
    description='South African payroll tax calculations: PAYE, UIF, SDL, ETI and payslips.',
    python_requires='>=3.10',
)
