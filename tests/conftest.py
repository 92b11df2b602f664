import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))


SAMPLE_PROGRAM = '''
import std::io;

const MAX: i32 = 10;

struct Int {
    num: i32,
}

enum IntOrNothing {
    Int(Int),
    Nothing,
}

mod math {
    import std::num;

    fn square(x: i32) -> i32 {
        return x * x;
    }
}

# sums an array
fn sum(a: &[i32]) -> i32 {
    let total: i32 = 0;
    for x in a {
        total += x;
    }
    return total;
}

fn main() {
    let arr = [1, 2, 3];
    let value = IntOrNothing::Int(Int { num: 5 });
    let i = 0;
    while i < MAX {
        if i == 5 {
            break;
        } else {
            i += 1;
        }
    }
    print(sum(&arr), math::square(2));
}
'''


@pytest.fixture
def sample_program():
    """A valid program exercising every item kind."""
    return SAMPLE_PROGRAM
