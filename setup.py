from setuptools import setup, find_packages

setup(
    name='tern-frontend',
    version='0.1.0',
    py_modules=['ternc', 'frontend'],
    packages=find_packages(include=['tern', 'tern.*']),
    python_requires='>=3.9',
    install_requires=[
        'lark',
        'pydantic>=2',
    ],
    extras_require={
        'test': ['pytest'],
    },
    entry_points={
        'console_scripts': [
            'ternc = ternc:main',
        ],
    },
)
