from setuptools import find_packages, setup
import os
import codecs

from somnium import __version__

with codecs.open(os.path.join(os.path.dirname(__file__), 'README.md'), 'r', encoding='utf-8') as f:
    description = f.read()


setup(
    author='The somnium developers',
    classifiers=[
        "Development Status :: 3 - Alpha",
        'Intended Audience :: Developers',
        'Intended Audience :: Science/Research',
        'License :: OSI Approved :: Apache Software License',
        'Programming Language :: Python :: 3',
        "Topic :: Scientific/Engineering",
        "Topic :: Multimedia :: Graphics",
    ],
    description='Deep dream image synthesis with pretrained convolutional networks',
    include_package_data=True,
    install_requires=['numpy', 'matplotlib', 'pillow', 'tensorflow', 'click'],
    extras_require = {
        'gpu' : ['tensorflow[and-cuda]'],
        'cli': ['graphviz'],
        'test': ['pytest'],
    },
    entry_points = {
        'console_scripts': [
            'somnium = somnium.cli:run_app'
        ]
    },
    keywords=['CNN', 'neural networks', 'deep dream', 'gradient ascent'],
    license='Apache License, Version 2.0',
    long_description=description,
    long_description_content_type='text/markdown',
    name='somnium',
    packages=find_packages(exclude=['tests']),
    python_requires = "~=3.9",
    platforms=['any'],
    version=__version__,
)
