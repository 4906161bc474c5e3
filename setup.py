from setuptools import setup, find_packages
import re

# Read version from leavecalc/__init__.py
with open('leavecalc/__init__.py') as f:
    version = re.search(r'^__version__ = ["\']([^"\']+)["\']', f.read(), re.MULTILINE).group(1)

setup(
    name='leavecalc',
    version=version,
    packages=find_packages(include=['leavecalc', 'leavecalc.*']),
    install_requires=[
        'PyYAML>=6.0',
        'click>=8.0',
        'pydantic>=2.0.0',
        'python-dateutil>=2.8',
        'rich>=13.0',
    ],
    extras_require={
        'mcp': [
            'mcp[cli]>=1.0.0,<2',
        ],
        'test': [
            'pytest>=7.0',
        ],
    },
    entry_points={
        'console_scripts': [
            'leave-calc=leavecalc.cli.__main__:main',
            'leave-calc-mcp=leavecalc.mcp.server:run_server',
        ],
    },
    author='Personal',
    description='Statutory paid-leave accrual, consumption and balance tracking.',
    python_requires='>=3.10',
)
