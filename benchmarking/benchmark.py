#!/usr/bin/env python
"""benchmark.py.

File to profile bsondissect against a pymongo-based conversion.
"""
import os
import io
import argparse
import cProfile
import bson
from bson import json_util
import bsondissect


class NullSink(object):

    def write(self, ordinal, data):
        pass


def get_test_file_path():
    return os.path.join(
        os.path.dirname(os.path.realpath(__file__)),
        "test.bson"
    )


def generate_test_file(path, count):
    with open(path, "wb") as stm:
        for i in range(count):
            stm.write(bson.encode({
                "_id": bson.ObjectId(),
                "index": i,
                "name": "document {}".format(i),
                "tags": ["a", "b", "c"],
                "nested": {"value": i * 1.5, "flag": i % 2 == 0},
            }))


def run_pymongo_test():
    path = get_test_file_path()
    with open(path, "rb") as stm:
        data = stm.read()
    # Start the test here.
    with cProfile.Profile() as pr:
        for doc in bson.decode_all(data):
            json_util.dumps(doc).encode("utf-8")
        pr.print_stats(sort="time")


def run_bsondissect_test(prefetch):
    path = get_test_file_path()
    options = bsondissect.DissectOptions(prefetch=prefetch)
    # Start the test here.
    with cProfile.Profile() as pr:
        with io.open(path, "rb") as stm:
            bsondissect.dissect(stm, NullSink(), options)
        pr.print_stats(sort="time")


def run():
    parser = argparse.ArgumentParser(description="Run profiling around BSON to JSON conversion.")
    parser.add_argument("lib_to_test", choices=["bsondissect", "pymongo"], help="Run the tests with this library.")
    parser.add_argument("--count", type=int, default=100000, help="Number of documents to generate if test.bson is missing.")
    parser.add_argument("--prefetch", type=int, default=0, help="Prefetch depth for bsondissect.")

    args = parser.parse_args()
    if not os.path.exists(get_test_file_path()):
        generate_test_file(get_test_file_path(), args.count)

    lib = args.lib_to_test
    print(f"TESTING LIBRARY {lib}")
    if lib == "bsondissect":
        run_bsondissect_test(args.prefetch)
    elif lib == "pymongo":
        run_pymongo_test()
    else:
        print("(no matching library found)")


if __name__ == "__main__":
    run()
