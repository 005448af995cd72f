"""Block-document rendering: conversion, sanitization, highlighting, surfaces."""
