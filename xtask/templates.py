from string import Template

CARGO_TOML_LIB = """
[lib]
crate-type = ["staticlib"]

"""
"Appended to a new crate's Cargo.toml, so it builds as an archive CMake can link"

RUNTIME_DEPENDENCIES = ["cxx", "cxx-qt", "cxx-qt-lib"]
BUILD_DEPENDENCIES = ["cxx-qt-build"]

BUILD_RS_TEMPLATE = Template(
    """
//Generated build.rs, modify as needed

use cxx_qt_build::{CxxQtBuilder, QmlModule};

fn main() {
    CxxQtBuilder::new()
        // Link Qt's Network library
        // - Qt Core is always linked
        // - Qt Gui is linked by enabling the qt_gui Cargo feature (default).
        // - Qt Qml is linked by enabling the qt_qml Cargo feature (default).
        // - Qt Qml requires linking Qt Network on macOS
        // - use .qt_module("Network") qt link a Qt library e.g. Link Qt's Network library
        // .qml_module(QmlModule {
        //     uri: "org.prismlauncher.hematite.$crate",
        //     rust_files: &["src/cxxqt_object.rs"],
        //     qml_files: &["../qml/main.qml"],
        //     ..Default::default()
        // })
        .file("src/lib.rs")
        .cc_builder(|cc| {
            cc.include("../../")
        })
        .build();
}
""".lstrip()
)

LIB_RS = """
/// The bridge definition for our QObject
#[cxx_qt::bridge]
pub mod qobject {

    unsafe extern "C++" {
        include!("cxx-qt-lib/qstring.h");
        /// An alias to the QString type
        type QString = cxx_qt_lib::QString;
    }

    unsafe extern "RustQt" {
        // The QObject definition
        // We tell CXX-Qt that we want a QObject class with the name MyObject
        // based on the Rust struct MyObjectRust.
        #[qobject]
        type MyObject = super::MyObjectRust;
    }

    unsafe extern "RustQt" {
        // Declare the invocable methods we want to expose on the QObject
    }
}

use core::pin::Pin;
use cxx_qt_lib::QString;

/// The Rust struct for the QObject
#[derive(Default)]
pub struct MyObjectRust {
}

impl qobject::MyObject {
}

""".lstrip()


def build_rs(crate_name: str) -> str:
    return BUILD_RS_TEMPLATE.substitute(crate=crate_name)
